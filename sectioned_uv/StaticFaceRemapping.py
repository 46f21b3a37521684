from . import BucketEncoding, MeshData, SlotCompaction
import numpy

#
# Static meshes store one material slot per face and UVs per face corner, so
# consolidating material slots needs no buffer surgery: every face keeps its
# corners, and only its material slot and its sectioned UV channel change.
#

def sectionedChannelIndex(channelCount, lightMapCoordinateIndex):
	if lightMapCoordinateIndex is None:
		return channelCount
	return max(channelCount, lightMapCoordinateIndex + 1)

def checkChannelCounts(mesh):
	channelCounts = set(lodModel.numTexCoords for lodModel in mesh.lodModels)
	if len(channelCounts) != 1:
		raise MeshData.InconsistentChannelCount("Static mesh '%s' LODs have differing UV channel counts %s" % (
			mesh.name,
			sorted(channelCounts),
		))
	(channelCount, ) = channelCounts
	if channelCount == 0:
		raise MeshData.StructuralError("Static mesh '%s' has no UV channel to copy from" % mesh.name)
	return channelCount

#
# Grows the UV channel array of a LOD so that channel index lastChannel
# exists. New channels are zero-filled.
#
def allocateChannels(lodModel, lastChannel):
	missingChannels = lastChannel + 1 - lodModel.numTexCoords
	if missingChannels <= 0:
		return
	padding = numpy.zeros((missingChannels, ) + lodModel.uvs.shape[1:], dtype = lodModel.uvs.dtype)
	lodModel.uvs = numpy.concatenate([lodModel.uvs, padding])

def remapLodFaces(lodModel, consolidationSet, slotRemap, consolidatedSlot, sectionedChannel, numSections):
	originalMaterials = lodModel.faceMaterialIndices.copy()
	lodModel.uvs[sectionedChannel] = lodModel.uvs[0]

	remappedMaterials = numpy.array([slotRemap[int(materialIndex)] for materialIndex in originalMaterials], dtype = numpy.int32)
	lodModel.faceMaterialIndices = remappedMaterials

	consolidatedFaces = remappedMaterials == consolidatedSlot
	for materialSlot in consolidationSet:
		faces = consolidatedFaces & (originalMaterials == materialSlot)
		if not numpy.any(faces):
			continue
		bucket = BucketEncoding.bucketIndex(materialSlot, consolidationSet)
		lodModel.uvs[sectionedChannel, faces, :, 0] = BucketEncoding.bucketMidpoint(bucket, numSections)

	return int(numpy.count_nonzero(consolidatedFaces))

#
# Consolidates, in place, the material slots in materialSlots of a static
# mesh into a single slot, and writes the sectioned UV channel. Returns the
# index of the sectioned UV channel.
#
def mergeFaceMaterials(mesh, materialSlots, numSections, settings = None, diagnostics = None):
	if settings is None:
		settings = MeshData.MergeSettings()
	if diagnostics is None:
		diagnostics = MeshData.Diagnostics()

	consolidationSet = SlotCompaction.validateConsolidation(mesh.materials, materialSlots, numSections, settings)
	if len(mesh.lodModels) == 0:
		raise MeshData.NoGeometryModel("Static mesh '%s' has no geometry" % mesh.name)

	channelCount = checkChannelCounts(mesh)
	lightMapCoordinateIndex = mesh.lightMapCoordinateIndex
	if lightMapCoordinateIndex is None:
		lightMapCoordinateIndex = settings.lightMapCoordinateIndex
	maxTexCoords = min(mesh.maxTexCoords, settings.maxTexCoords)

	sectionedChannel = sectionedChannelIndex(channelCount, lightMapCoordinateIndex)
	if sectionedChannel >= maxTexCoords:
		raise MeshData.ChannelLimitExceeded("Static mesh '%s' needs UV channel %s, but supports only %s channels" % (
			mesh.name,
			sectionedChannel,
			maxTexCoords,
		))

	for (lodIndex, lodModel) in enumerate(mesh.lodModels):
		if lodModel.numFaces > 0 and (lodModel.faceMaterialIndices.min() < 0 or lodModel.faceMaterialIndices.max() >= len(mesh.materials)):
			raise MeshData.StructuralError("Static mesh '%s' LOD %s has faces referencing missing material slots" % (mesh.name, lodIndex))

	slotRemap = SlotCompaction.compactSlots(len(mesh.materials), consolidationSet)
	consolidatedSlot = slotRemap[consolidationSet[0]]
	mesh.materials = SlotCompaction.compactMaterials(mesh.materials, consolidationSet, settings.consolidatedSlotName)

	for lodModel in mesh.lodModels:
		allocateChannels(lodModel, sectionedChannel)

	for (lodIndex, lodModel) in enumerate(mesh.lodModels):
		faceCount = remapLodFaces(lodModel, consolidationSet, slotRemap, consolidatedSlot, sectionedChannel, numSections)
		diagnostics.info("LOD %s: %s of %s faces use the consolidated material" % (lodIndex, faceCount, lodModel.numFaces))

	return sectionedChannel
