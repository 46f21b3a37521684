import bpy
import bmesh
import numpy

from . import Assets, MeshData, SectionedMesh

#
# Blender meshes are face based: each polygon has a material index, and UV
# layers store one coordinate per loop (face corner). After triangulation
# this is exactly a single-LOD MeshData.StaticMesh.
#

def triangulateMesh(blenderMesh):
	bm = bmesh.new()
	bm.from_mesh(blenderMesh)
	bmesh.ops.triangulate(bm, faces = bm.faces[:])
	triangulatedMesh = bpy.data.meshes.new(blenderMesh.name)
	bm.to_mesh(triangulatedMesh)
	bm.free()
	return triangulatedMesh

def readStaticMesh(blenderObject, blenderMesh):
	vertexCount = len(blenderMesh.vertices)
	faceCount = len(blenderMesh.polygons)

	positions = numpy.zeros(vertexCount * 3, dtype = numpy.float32)
	blenderMesh.vertices.foreach_get("co", positions)

	loopVertices = numpy.zeros(len(blenderMesh.loops), dtype = numpy.int32)
	blenderMesh.loops.foreach_get("vertex_index", loopVertices)

	materialIndices = numpy.zeros(faceCount, dtype = numpy.int32)
	blenderMesh.polygons.foreach_get("material_index", materialIndices)

	uvs = numpy.zeros((len(blenderMesh.uv_layers), faceCount * 3 * 2), dtype = numpy.float32)
	for (i, uvLayer) in enumerate(blenderMesh.uv_layers):
		uvLayer.data.foreach_get("uv", uvs[i])

	lodModel = MeshData.StaticMesh.LodModel(
		positions.reshape(vertexCount, 3),
		loopVertices.reshape(faceCount, 3).astype(numpy.uint32),
		materialIndices,
		uvs.reshape(len(blenderMesh.uv_layers), faceCount, 3, 2),
	)

	staticMesh = MeshData.StaticMesh()
	staticMesh.path = blenderObject.name
	staticMesh.name = blenderObject.name
	staticMesh.materials = [
		MeshData.MaterialSlot(materialSlot.name, materialSlot.material) for materialSlot in blenderObject.material_slots
	]
	staticMesh.lodModels = [lodModel]
	return staticMesh

def writeStaticMesh(staticMesh, blenderMesh, sectionedLayerName):
	lodModel = staticMesh.lodModels[0]

	while len(blenderMesh.uv_layers) < lodModel.numTexCoords:
		if len(blenderMesh.uv_layers) == lodModel.numTexCoords - 1:
			name = sectionedLayerName
		else:
			name = "UVMap.%03d" % len(blenderMesh.uv_layers)
		blenderMesh.uv_layers.new(name = name, do_init = False)

	for (i, uvLayer) in enumerate(blenderMesh.uv_layers):
		uvLayer.data.foreach_set("uv", lodModel.uvs[i].reshape(-1))

	blenderMesh.polygons.foreach_set("material_index", lodModel.faceMaterialIndices)

	blenderMesh.materials.clear()
	for materialSlot in staticMesh.materials:
		material = materialSlot.material
		if material is None and materialSlot.name == sectionedLayerName:
			material = bpy.data.materials.get(materialSlot.name)
			if material is None:
				material = bpy.data.materials.new(materialSlot.name)
		blenderMesh.materials.append(material)

	blenderMesh.update()

#
# Asset registry whose assets become Blender objects when persisted. Only the
# persist step touches Blender data; a failed transform leaves the blend file
# alone.
#
class BlenderAssetRegistry(Assets.AssetRegistry):
	def __init__(self, context, sourceObject, triangulatedMesh, settings):
		super().__init__()
		self.context = context
		self.sourceObject = sourceObject
		self.triangulatedMesh = triangulatedMesh
		self.settings = settings
		self.blenderObjects = {}

	def allocateStorageLocation(self, basePath):
		if basePath not in bpy.data.objects and basePath not in self.assets:
			return basePath
		suffix = 1
		while "%s%s" % (basePath, suffix) in bpy.data.objects or "%s%s" % (basePath, suffix) in self.assets:
			suffix += 1
		return "%s%s" % (basePath, suffix)

	#
	# The asset is only registered once its Blender object exists.
	#
	def persistAndRegister(self, asset):
		if asset.path in self.assets and self.assets[asset.path] is not asset:
			raise MeshData.ResourceAllocationError("Storage location '%s' is already in use" % asset.path)

		blenderMesh = self.triangulatedMesh
		blenderMesh.name = asset.name
		writeStaticMesh(asset, blenderMesh, self.settings.consolidatedSlotName)

		blenderObject = self.sourceObject.copy()
		try:
			blenderObject.data = blenderMesh
			blenderObject.name = asset.name
			self.context.collection.objects.link(blenderObject)
		except Exception:
			bpy.data.objects.remove(blenderObject)
			raise

		super().persistAndRegister(asset)
		self.blenderObjects[asset.path] = blenderObject

def createSectionedBlenderMesh(context, objectName, materialSlots, numSections, settings = None):
	if settings is None:
		settings = MeshData.MergeSettings()

	blenderObject = context.scene.objects[objectName]
	if blenderObject.type != 'MESH':
		raise MeshData.InputValidationError("Object '%s' is not a mesh" % objectName)
	if len(blenderObject.data.polygons) == 0:
		raise MeshData.NoGeometryModel("Mesh '%s' has no faces" % objectName)

	triangulatedMesh = triangulateMesh(blenderObject.data)
	diagnostics = MeshData.Diagnostics()
	try:
		staticMesh = readStaticMesh(blenderObject, triangulatedMesh)
		assets = BlenderAssetRegistry(context, blenderObject, triangulatedMesh, settings)
		sectionedMesh = SectionedMesh.createSectionedStaticMesh(staticMesh, materialSlots, numSections, assets, settings, diagnostics)
	except Exception:
		bpy.data.meshes.remove(triangulatedMesh)
		raise

	return (assets.blenderObjects[sectionedMesh.path], diagnostics)
