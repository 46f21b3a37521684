import copy
import posixpath

from . import MeshData

#
# In-memory stand-in for the asset store a sectioned mesh is created in.
# Assets are addressed by path, like "/Game/Characters/Hero". An asset is
# only visible through find() after persistAndRegister().
#
class AssetRegistry:
	def __init__(self):
		self.assets = {}

	def find(self, path):
		return self.assets.get(path)

	def allocateStorageLocation(self, basePath):
		if basePath not in self.assets:
			return basePath
		suffix = 1
		while "%s%s" % (basePath, suffix) in self.assets:
			suffix += 1
		return "%s%s" % (basePath, suffix)

	def duplicateAsset(self, source, path):
		if path in self.assets:
			raise MeshData.ResourceAllocationError("Storage location '%s' is already in use" % path)
		duplicate = copy.deepcopy(source)
		duplicate.path = path
		duplicate.name = posixpath.basename(path)
		return duplicate

	def persistAndRegister(self, asset):
		if asset.path in self.assets and self.assets[asset.path] is not asset:
			raise MeshData.ResourceAllocationError("Storage location '%s' is already in use" % asset.path)
		self.assets[asset.path] = asset

	def discardAsset(self, asset):
		if self.assets.get(asset.path) is asset:
			del self.assets[asset.path]

	def rebuildRenderResources(self, asset):
		if isinstance(asset, MeshData.SkeletalMesh):
			rebuildSkeletalRenderData(asset)
		elif isinstance(asset, MeshData.StaticMesh):
			rebuildStaticRenderData(asset)
		else:
			raise MeshData.StructuralError("Cannot build render data for %s" % type(asset).__name__)



def checkSkeletalLod(mesh, lodIndex, lodModel):
	errors = []
	nextVertex = 0
	nextIndex = 0
	for (sectionIndex, section) in enumerate(lodModel.sections):
		if section.baseVertexIndex != nextVertex:
			errors.append("section %s starts at vertex %s instead of %s" % (sectionIndex, section.baseVertexIndex, nextVertex))
		if section.baseIndex != nextIndex:
			errors.append("section %s starts at index %s instead of %s" % (sectionIndex, section.baseIndex, nextIndex))
		if section.vertices.uvs.shape[1] != lodModel.numTexCoords:
			errors.append("section %s has %s UV channels instead of %s" % (sectionIndex, section.vertices.uvs.shape[1], lodModel.numTexCoords))
		if section.materialIndex < 0 or section.materialIndex >= len(mesh.materials):
			errors.append("section %s references material slot %s" % (sectionIndex, section.materialIndex))
		nextVertex += section.numVertices
		nextIndex += section.numTriangles * 3

	if nextVertex != lodModel.numVertices:
		errors.append("sections hold %s vertices, LOD has %s" % (nextVertex, lodModel.numVertices))
	if nextIndex != len(lodModel.indexBuffer):
		errors.append("sections hold %s indices, index buffer has %s" % (nextIndex, len(lodModel.indexBuffer)))
	if len(lodModel.indexBuffer) > 0 and int(lodModel.indexBuffer.max()) >= lodModel.numVertices:
		errors.append("index buffer references vertex %s of %s" % (int(lodModel.indexBuffer.max()), lodModel.numVertices))

	if len(errors) > 0:
		raise MeshData.StructuralError("Skeletal mesh '%s' LOD %s is inconsistent: %s" % (mesh.name, lodIndex, "; ".join(errors)))

def rebuildSkeletalRenderData(mesh):
	renderData = []
	for (lodIndex, lodModel) in enumerate(mesh.lodModels):
		checkSkeletalLod(mesh, lodIndex, lodModel)
		renderData.append(MeshData.RenderLod(lodModel.numVertices, len(lodModel.indexBuffer) // 3))

	mesh.renderData = renderData
	if len(mesh.lodModels) > 0:
		mesh.boundingBox = MeshData.BoundingBox.fromPositions([section.vertices.positions for section in mesh.lodModels[0].sections])
	else:
		mesh.boundingBox = MeshData.BoundingBox.fromPositions([])

def rebuildStaticRenderData(mesh):
	renderData = []
	for (lodIndex, lodModel) in enumerate(mesh.lodModels):
		if lodModel.uvs.shape[1] != lodModel.numFaces:
			raise MeshData.StructuralError("Static mesh '%s' LOD %s has UVs for %s faces, but %s faces" % (
				mesh.name,
				lodIndex,
				lodModel.uvs.shape[1],
				lodModel.numFaces,
			))
		renderData.append(MeshData.RenderLod(len(lodModel.positions), lodModel.numFaces))

	mesh.renderData = renderData
	if len(mesh.lodModels) > 0:
		mesh.boundingBox = MeshData.BoundingBox.fromPositions([mesh.lodModels[0].positions])
	else:
		mesh.boundingBox = MeshData.BoundingBox.fromPositions([])
