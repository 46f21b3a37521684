import numpy

#
# A skeletal LOD keeps its sections as consecutive ranges of one shared index
# buffer and one shared vertex range. Removing a section therefore shifts
# every later section down, and every index that points past the removed
# vertex range down with it.
#

def isSectionRemovable(lodModel, sectionIndex):
	return lodModel.sections[sectionIndex].clothBinding is None

#
# Returns False, without touching the LOD, for sections that are bound to
# cloth data. Callers removing several sections must go from the highest
# section index to the lowest.
#
def removeSection(lodModel, sectionIndex):
	if sectionIndex < 0 or sectionIndex >= len(lodModel.sections):
		raise IndexError("Section index %s out of range" % sectionIndex)

	if not isSectionRemovable(lodModel, sectionIndex):
		return False

	section = lodModel.sections[sectionIndex]
	numVertices = section.numVertices
	numIndices = section.numTriangles * 3
	baseVertexIndex = section.baseVertexIndex

	indexBuffer = numpy.delete(lodModel.indexBuffer, numpy.s_[section.baseIndex : section.baseIndex + numIndices])
	indexBuffer[indexBuffer >= baseVertexIndex] -= numVertices
	lodModel.indexBuffer = indexBuffer
	lodModel.numVertices -= numVertices

	del lodModel.sections[sectionIndex]

	for laterSection in lodModel.sections[sectionIndex:]:
		laterSection.baseIndex -= numIndices
		laterSection.baseVertexIndex -= numVertices

	for otherSection in lodModel.sections:
		binding = otherSection.clothBinding
		if binding is not None and binding.sectionIndex is not None and binding.sectionIndex > sectionIndex:
			binding.sectionIndex -= 1

	return True
