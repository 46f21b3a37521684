from . import BucketEncoding, MeshData, MorphTargetRemapping, SectionBuffers, SlotCompaction
import numpy

#
# Skeletal meshes draw each material slot with one or more sections. This
# module folds every section that uses one of a chosen set of material slots
# into a single section, using a single new material slot, and records in a
# newly added UV channel which slot each vertex came from (see
# BucketEncoding).
#
# The merge never adds or drops vertices or triangles. The merged section is
# appended after all surviving sections; the sections it was built from are
# removed from the LOD buffers, which shifts every later section and index
# down. Morph targets reference vertices by LOD-global index and are
# re-targeted afterwards through a SectionRemap.
#
# Bone indices in a section's vertices are local to that section's bone map.
# The merged section's bone map is the concatenation of the merged bone
# maps, so each merged section's vertex bone indices are shifted by the size
# of the bone map built so far.
#

#
# Bone index buffers narrower than 16 bits cannot address more bones than this.
#
NARROW_BONE_INDEX_LIMIT = 256
#
# Vertex bone indices are stored as uint16, so a merged bone map can't hold
# more bones than this.
#
WIDE_BONE_INDEX_LIMIT = 65536



#
# Describes, for one LOD, where every pre-merge section ended up.
#
class SectionRemap:
	def __init__(self, originalSections):
		# (baseVertexIndex, numVertices) of every section before the merge
		self.originalSections = tuple(originalSections)
		# old section index => new section index, None for merged sections
		self.sectionIndices = []
		# old section index => first vertex of its data in the merged section
		self.mergedOffsets = {}
		self.mergedSectionIndex = None
		# new section index => base vertex index after the merge
		self.baseVertexIndices = []

	def destinationSection(self, sectionIndex):
		newSectionIndex = self.sectionIndices[sectionIndex]
		if newSectionIndex is None:
			return self.mergedSectionIndex
		return newSectionIndex

	def mergedOffset(self, sectionIndex):
		return self.mergedOffsets.get(sectionIndex, 0)

#
# Finds sections using a consolidated material that can't be taken out of
# the LOD buffers. Depending on the policy, this either fails the merge or
# leaves those sections in place, drawn with the consolidated material.
#
def findExcludedSections(mesh, consolidationSet, settings, diagnostics):
	consolidated = set(consolidationSet)
	excludedSections = {}
	for (lodIndex, lodModel) in enumerate(mesh.lodModels):
		excludedSections[lodIndex] = set()
		for (sectionIndex, section) in enumerate(lodModel.sections):
			if section.materialIndex not in consolidated:
				continue
			if SectionBuffers.isSectionRemovable(lodModel, sectionIndex):
				continue
			if settings.unremovableSectionPolicy == 'exclude':
				diagnostics.warning("LOD %s section %s is bound to cloth asset '%s' and will not be merged" % (
					lodIndex,
					sectionIndex,
					section.clothBinding.assetName,
				))
				excludedSections[lodIndex].add(sectionIndex)
			else:
				raise MeshData.UnremovableSection("LOD %s section %s is bound to cloth asset '%s' and cannot be merged" % (
					lodIndex,
					sectionIndex,
					section.clothBinding.assetName,
				))
	return excludedSections

def checkSectionMaterials(mesh):
	for (lodIndex, lodModel) in enumerate(mesh.lodModels):
		for (sectionIndex, section) in enumerate(lodModel.sections):
			if section.materialIndex is None or section.materialIndex < 0 or section.materialIndex >= len(mesh.materials):
				raise MeshData.StructuralError("LOD %s section %s references material slot %s, mesh has %s slots" % (
					lodIndex,
					sectionIndex,
					section.materialIndex,
					len(mesh.materials),
				))

def checkTexCoords(mesh):
	for (lodIndex, lodModel) in enumerate(mesh.lodModels):
		if lodModel.numTexCoords == 0:
			raise MeshData.StructuralError("Skeletal mesh '%s' LOD %s has no UV channel to copy from" % (mesh.name, lodIndex))
		for (sectionIndex, section) in enumerate(lodModel.sections):
			if section.vertices.uvs.shape[1] == 0:
				raise MeshData.StructuralError("Skeletal mesh '%s' LOD %s section %s has no UV channel to copy from" % (
					mesh.name,
					lodIndex,
					sectionIndex,
				))

def buildMergedSection(blocks, boneMap, numTriangles, maxBoneInfluences, use16BitBoneIndex, materialIndex):
	section = MeshData.SkeletalMesh.Section()
	section.materialIndex = materialIndex
	section.numTriangles = numTriangles
	section.vertices = MeshData.SkeletalMesh.Vertices.concatenate(blocks)
	section.boneMap = boneMap
	section.maxBoneInfluences = maxBoneInfluences
	section.use16BitBoneIndex = use16BitBoneIndex or len(boneMap) > NARROW_BONE_INDEX_LIMIT
	return section

def mergeLodSections(lodModel, consolidationSet, slotRemap, consolidatedSlot, numSections, excludedSections, settings, diagnostics):
	consolidated = set(consolidationSet)
	remap = SectionRemap((section.baseVertexIndex, section.numVertices) for section in lodModel.sections)
	originalMaterials = [section.materialIndex for section in lodModel.sections]

	for section in lodModel.sections:
		section.vertices.appendTexCoord()
	lodModel.numTexCoords += 1
	sectionedChannel = lodModel.numTexCoords - 1

	mergedSectionIndices = []
	mergedBlocks = []
	mergedIndices = []
	mergedBoneMap = []
	mergedTriangles = 0
	maxBoneInfluences = 0
	use16BitBoneIndex = False
	#
	# (first vertex, vertex count, original material slot) for each section
	# that went into the merged section
	#
	mergedMaterialRuns = []

	oldAccumulatedOffset = 0
	newMergedOffset = 0
	for (sectionIndex, section) in enumerate(lodModel.sections):
		numVertices = section.numVertices
		if section.materialIndex in consolidated and sectionIndex not in excludedSections:
			if len(mergedBoneMap) + len(section.boneMap) > WIDE_BONE_INDEX_LIMIT:
				raise MeshData.StructuralError("Merged section would reference %s bones, more than 16 bit bone indices can address" % (
					len(mergedBoneMap) + len(section.boneMap),
				))
			vertices = section.vertices
			mergedBlocks.append(MeshData.SkeletalMesh.Vertices(
				vertices.positions,
				vertices.uvs,
				vertices.boneIndices + numpy.uint16(len(mergedBoneMap)),
				vertices.boneWeights,
			))
			mergedBoneMap += section.boneMap

			indices = lodModel.indexBuffer[section.baseIndex : section.baseIndex + section.numTriangles * 3].astype(numpy.int64)
			mergedIndices.append((indices - oldAccumulatedOffset) + newMergedOffset)

			remap.mergedOffsets[sectionIndex] = newMergedOffset
			mergedMaterialRuns.append((newMergedOffset, numVertices, section.materialIndex))
			mergedSectionIndices.append(sectionIndex)

			mergedTriangles += section.numTriangles
			maxBoneInfluences = max(maxBoneInfluences, section.maxBoneInfluences)
			use16BitBoneIndex = use16BitBoneIndex or section.use16BitBoneIndex
			newMergedOffset += numVertices
		else:
			section.materialIndex = slotRemap[section.materialIndex]
		oldAccumulatedOffset += numVertices

	for sectionIndex in reversed(mergedSectionIndices):
		if not SectionBuffers.removeSection(lodModel, sectionIndex):
			raise MeshData.UnremovableSection("Section %s could not be removed from its LOD" % sectionIndex)

	if len(mergedSectionIndices) > 0:
		mergedSection = buildMergedSection(
			mergedBlocks,
			mergedBoneMap,
			mergedTriangles,
			maxBoneInfluences,
			use16BitBoneIndex,
			consolidatedSlot,
		)
		if len(mergedBoneMap) > settings.maxBonesPerSection:
			diagnostics.warning("Merged section references %s bones, more than the limit of %s" % (len(mergedBoneMap), settings.maxBonesPerSection))

		mergedSection.baseIndex = len(lodModel.indexBuffer)
		mergedSection.baseVertexIndex = lodModel.numVertices
		indices = numpy.concatenate(mergedIndices) + lodModel.numVertices
		lodModel.indexBuffer = numpy.concatenate([lodModel.indexBuffer, indices.astype(numpy.uint32)])
		lodModel.numVertices += mergedSection.numVertices
		lodModel.sections.append(mergedSection)
		remap.mergedSectionIndex = len(lodModel.sections) - 1

	originalSectionIndices = {}
	newSectionIndex = 0
	for sectionIndex in range(len(originalMaterials)):
		if sectionIndex in remap.mergedOffsets:
			remap.sectionIndices.append(None)
		else:
			remap.sectionIndices.append(newSectionIndex)
			originalSectionIndices[newSectionIndex] = sectionIndex
			newSectionIndex += 1
	remap.baseVertexIndices = [section.baseVertexIndex for section in lodModel.sections]

	for (sectionIndex, section) in enumerate(lodModel.sections):
		uvs = section.vertices.uvs
		uvs[:, sectionedChannel, :] = uvs[:, 0, :]
		if section.materialIndex != consolidatedSlot:
			continue

		if sectionIndex == remap.mergedSectionIndex:
			materialRuns = mergedMaterialRuns
		else:
			materialRuns = [(0, section.numVertices, originalMaterials[originalSectionIndices[sectionIndex]])]

		for (firstVertex, numVertices, originalMaterial) in materialRuns:
			bucket = BucketEncoding.bucketIndex(originalMaterial, consolidationSet)
			vertexRange = slice(firstVertex, firstVertex + numVertices)
			uvs[vertexRange, sectionedChannel, :] = BucketEncoding.encodeSectionedUVs(uvs[vertexRange, 0, :], bucket, numSections)

	if remap.mergedSectionIndex is not None:
		diagnostics.info("Merged %s sections into section %s (%s vertices, %s triangles)" % (
			len(mergedSectionIndices),
			remap.mergedSectionIndex,
			newMergedOffset,
			mergedTriangles,
		))

	return remap

#
# Merges, in place, all sections of mesh that use one of the material slots
# in materialSlots. mesh must be a private copy: on failure it is left in an
# undefined state. Returns the SectionRemap of every LOD.
#
def mergeSections(mesh, materialSlots, numSections, settings = None, diagnostics = None):
	if settings is None:
		settings = MeshData.MergeSettings()
	if diagnostics is None:
		diagnostics = MeshData.Diagnostics()

	consolidationSet = SlotCompaction.validateConsolidation(mesh.materials, materialSlots, numSections, settings)
	if len(mesh.lodModels) == 0:
		raise MeshData.NoGeometryModel("Skeletal mesh '%s' has no geometry" % mesh.name)
	checkSectionMaterials(mesh)
	checkTexCoords(mesh)
	excludedSections = findExcludedSections(mesh, consolidationSet, settings, diagnostics)

	slotRemap = SlotCompaction.compactSlots(len(mesh.materials), consolidationSet)
	consolidatedSlot = slotRemap[consolidationSet[0]]
	mesh.materials = SlotCompaction.compactMaterials(mesh.materials, consolidationSet, settings.consolidatedSlotName)

	remaps = []
	for (lodIndex, lodModel) in enumerate(mesh.lodModels):
		remap = mergeLodSections(
			lodModel,
			consolidationSet,
			slotRemap,
			consolidatedSlot,
			numSections,
			excludedSections[lodIndex],
			settings,
			diagnostics,
		)
		MorphTargetRemapping.remapMorphTargets(mesh.morphTargets, lodIndex, remap)
		remaps.append(remap)

	return remaps
