from . import MeshData
import numpy

#
# Morph target deltas point at vertices by LOD-global index. After sections
# have been merged, a vertex keeps its position within its old section, but
# that section now either starts at a different base vertex, or lives inside
# the merged section at some offset.
#
# new index = offset within old section
#           + offset of old section within merged section (0 if not merged)
#           + base vertex of destination section
#

def remapMorphTargets(morphTargets, lodIndex, sectionRemap):
	vertexCounts = numpy.array([numVertices for (baseVertexIndex, numVertices) in sectionRemap.originalSections], dtype = numpy.int64)
	rangeEnds = numpy.cumsum(vertexCounts)
	rangeStarts = rangeEnds - vertexCounts

	sectionCount = len(sectionRemap.originalSections)
	destinations = numpy.array([sectionRemap.destinationSection(i) for i in range(sectionCount)], dtype = numpy.int64)
	mergedOffsets = numpy.array([sectionRemap.mergedOffset(i) for i in range(sectionCount)], dtype = numpy.int64)
	baseVertexIndices = numpy.array(sectionRemap.baseVertexIndices, dtype = numpy.int64)

	for morphTarget in morphTargets:
		if lodIndex >= len(morphTarget.lodModels):
			continue
		morphLod = morphTarget.lodModels[lodIndex]
		sourceIndices = numpy.asarray(morphLod.sourceIndices, dtype = numpy.int64)

		#
		# The owning section is the first vertex range that contains the
		# index. Empty sections never contain anything.
		#
		owners = numpy.searchsorted(rangeEnds, sourceIndices, side = 'right')
		invalid = (owners >= sectionCount) | (sourceIndices < 0)
		if numpy.any(invalid):
			raise MeshData.StructuralError("Morph target '%s' LOD %s references vertex %s outside of the mesh" % (
				morphTarget.name,
				lodIndex,
				int(sourceIndices[invalid][0]),
			))

		localOffsets = sourceIndices - rangeStarts[owners]
		sectionIndices = destinations[owners]
		morphLod.sourceIndices = (localOffsets + mergedOffsets[owners] + baseVertexIndices[sectionIndices]).astype(numpy.uint32)

		touchedSections = []
		seen = set()
		for sectionIndex in sectionIndices.tolist():
			if sectionIndex not in seen:
				seen.add(sectionIndex)
				touchedSections.append(sectionIndex)
		morphLod.sectionIndices = touchedSections
