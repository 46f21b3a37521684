from . import Assets, MeshData, SkeletalSectionMerging, SlotCompaction, StaticFaceRemapping

#
# Entry points. Each creates a new "<path>_sectioned" asset next to the
# source mesh, consolidates the requested material slots of the copy, and
# registers the copy. The source mesh is never modified; if anything fails
# after the copy was made, the copy is discarded and the error propagates.
#

def createSectionedMesh(mesh, materialSlots, numSections, assets, settings, diagnostics, transform):
	if mesh is None:
		raise MeshData.InputValidationError("No mesh given")
	if assets is None:
		assets = Assets.AssetRegistry()
	if settings is None:
		settings = MeshData.MergeSettings()
	if diagnostics is None:
		diagnostics = MeshData.Diagnostics()

	# Fail before allocating anything
	SlotCompaction.validateConsolidation(mesh.materials, materialSlots, numSections, settings)

	basePath = mesh.path
	if basePath is None:
		basePath = "/%s" % mesh.name
	path = assets.allocateStorageLocation(basePath + settings.storageSuffix)
	sectionedMesh = assets.duplicateAsset(mesh, path)
	if sectionedMesh is None:
		raise MeshData.ResourceAllocationError("Unable to create a copy of '%s' at '%s'" % (mesh.name, path))

	try:
		transform(sectionedMesh, materialSlots, numSections, settings, diagnostics)
		assets.rebuildRenderResources(sectionedMesh)
	except MeshData.SectionedUVError:
		assets.discardAsset(sectionedMesh)
		raise

	assets.persistAndRegister(sectionedMesh)
	diagnostics.info("Created sectioned mesh '%s'" % path)
	return sectionedMesh

def createSectionedSkeletalMesh(mesh, materialSlots, numSections = 16, assets = None, settings = None, diagnostics = None):
	if mesh is not None and not isinstance(mesh, MeshData.SkeletalMesh):
		raise MeshData.InputValidationError("'%s' is not a skeletal mesh" % mesh.name)
	return createSectionedMesh(mesh, materialSlots, numSections, assets, settings, diagnostics, SkeletalSectionMerging.mergeSections)

def createSectionedStaticMesh(mesh, materialSlots, numSections = 16, assets = None, settings = None, diagnostics = None):
	if mesh is not None and not isinstance(mesh, MeshData.StaticMesh):
		raise MeshData.InputValidationError("'%s' is not a static mesh" % mesh.name)
	return createSectionedMesh(mesh, materialSlots, numSections, assets, settings, diagnostics, StaticFaceRemapping.mergeFaceMaterials)
