import logging

import numpy

#
# Vertex bone influences are stored in fixed-width arrays, padded with zero
# weights, so that sections with different influence counts can be
# concatenated without reshaping.
#
MAX_TOTAL_INFLUENCES = 12

MAX_TEXCOORDS = 8



class SectionedUVError(Exception):
	reason = "SectionedUVError"

class InputValidationError(SectionedUVError):
	reason = "InputValidationError"

class InvalidSectionCount(InputValidationError):
	reason = "InvalidSectionCount"

class InvalidMaterialSlot(InputValidationError):
	reason = "InvalidMaterialSlot"

class InsufficientSections(InputValidationError):
	reason = "InsufficientSections"

class DuplicateReservedSlot(InputValidationError):
	reason = "DuplicateReservedSlot"

class ResourceAllocationError(SectionedUVError):
	reason = "ResourceAllocationError"

class StructuralError(SectionedUVError):
	reason = "StructuralError"

class NoGeometryModel(StructuralError):
	reason = "NoGeometryModel"

class ChannelLimitError(SectionedUVError):
	reason = "ChannelLimitError"

class ChannelLimitExceeded(ChannelLimitError):
	reason = "ChannelLimitExceeded"

class InconsistentChannelCount(ChannelLimitError):
	reason = "InconsistentChannelCount"

class PolicyGapError(SectionedUVError):
	reason = "PolicyGapError"

class UnremovableSection(PolicyGapError):
	reason = "UnremovableSection"

class FatalMergeWarning(SectionedUVError):
	reason = "FatalMergeWarning"



class MergeSettings:
	def __init__(self):
		self.consolidatedSlotName = "sectioned"
		# 'fail' or 'exclude'
		self.unremovableSectionPolicy = 'fail'
		self.maxBonesPerSection = 256
		self.lightMapCoordinateIndex = None
		self.maxTexCoords = MAX_TEXCOORDS
		self.storageSuffix = "_sectioned"

#
# Collects everything worth telling the user about a single transform. One
# Diagnostics object is passed down through a call; nothing is kept between
# calls.
#
class Diagnostics:
	def __init__(self, ignoreWarnings = True, logger = None):
		self.ignoreWarnings = ignoreWarnings
		self.warnings = []
		self.messages = []
		if logger is None:
			logger = logging.getLogger("sectioned_uv")
		self.logger = logger

	def info(self, message):
		self.messages.append(message)
		self.logger.info(message)

	def warning(self, message):
		if not self.ignoreWarnings:
			raise FatalMergeWarning(message)
		self.warnings.append(message)
		self.logger.warning(message)



class BoundingBox:
	def __init__(self, min, max):
		self.min = min
		self.max = max

	@staticmethod
	def fromPositions(positionArrays):
		positionArrays = [positions for positions in positionArrays if len(positions) > 0]
		if len(positionArrays) == 0:
			return BoundingBox(numpy.zeros(3), numpy.zeros(3))
		positions = numpy.concatenate(positionArrays)
		return BoundingBox(positions.min(axis = 0), positions.max(axis = 0))

class MaterialSlot:
	def __init__(self, name, material = None):
		self.name = name
		self.material = material

class ClothBinding:
	def __init__(self, assetName, sectionIndex):
		self.assetName = assetName
		# Index of the section in the same LOD this binding corresponds to
		self.sectionIndex = sectionIndex

class RenderLod:
	def __init__(self, numVertices, numTriangles):
		self.numVertices = numVertices
		self.numTriangles = numTriangles



class SkeletalMesh:
	#
	# Vertex attribute block of a section: one row per vertex.
	#   positions    float32 [n, 3]
	#   uvs          float32 [n, numTexCoords, 2]
	#   boneIndices  uint16  [n, MAX_TOTAL_INFLUENCES], section-local bone indices
	#   boneWeights  float32 [n, MAX_TOTAL_INFLUENCES]
	#
	class Vertices:
		def __init__(self, positions, uvs, boneIndices, boneWeights):
			self.positions = positions
			self.uvs = uvs
			self.boneIndices = boneIndices
			self.boneWeights = boneWeights

		def __len__(self):
			return len(self.positions)

		def appendTexCoord(self):
			self.uvs = numpy.concatenate([self.uvs, self.uvs[:, 0:1, :]], axis = 1)

		@staticmethod
		def concatenate(blocks):
			return SkeletalMesh.Vertices(
				numpy.concatenate([block.positions for block in blocks]),
				numpy.concatenate([block.uvs for block in blocks]),
				numpy.concatenate([block.boneIndices for block in blocks]),
				numpy.concatenate([block.boneWeights for block in blocks]),
			)

	class Section:
		def __init__(self):
			self.materialIndex = None
			self.baseVertexIndex = 0
			self.baseIndex = 0
			self.numTriangles = 0
			self.vertices = None
			self.boneMap = []
			self.maxBoneInfluences = 0
			self.use16BitBoneIndex = False
			self.clothBinding = None

		@property
		def numVertices(self):
			return len(self.vertices)

	class LodModel:
		def __init__(self):
			self.sections = []
			self.indexBuffer = numpy.zeros(0, dtype = numpy.uint32)
			self.numVertices = 0
			self.numTexCoords = 0

	def __init__(self):
		self.path = None
		self.name = None
		self.materials = []
		self.lodModels = []
		self.morphTargets = []
		# derived data
		self.boundingBox = None
		self.renderData = None



class MorphTarget:
	#
	# Sparse deltas for one LOD. sourceIndices refers to LOD-global vertex
	# indices. The payload arrays are carried along untouched.
	#
	class LodModel:
		def __init__(self, sourceIndices, positionDeltas, tangentDeltas, sectionIndices = None):
			self.sourceIndices = sourceIndices
			self.positionDeltas = positionDeltas
			self.tangentDeltas = tangentDeltas
			if sectionIndices is None:
				sectionIndices = []
			self.sectionIndices = sectionIndices

		@property
		def numDeltas(self):
			return len(self.sourceIndices)

	def __init__(self, name):
		self.name = name
		self.lodModels = []



class StaticMesh:
	#
	# Face-based geometry for one LOD.
	#   positions            float32 [numVertices, 3]
	#   faceVertexIndices    uint32  [numFaces, 3]
	#   faceMaterialIndices  int32   [numFaces]
	#   uvs                  float32 [numTexCoords, numFaces, 3, 2], per face corner
	#
	class LodModel:
		def __init__(self, positions, faceVertexIndices, faceMaterialIndices, uvs):
			self.positions = positions
			self.faceVertexIndices = faceVertexIndices
			self.faceMaterialIndices = faceMaterialIndices
			self.uvs = uvs

		@property
		def numFaces(self):
			return len(self.faceMaterialIndices)

		@property
		def numTexCoords(self):
			return self.uvs.shape[0]

	def __init__(self):
		self.path = None
		self.name = None
		self.materials = []
		self.lodModels = []
		self.lightMapCoordinateIndex = None
		self.maxTexCoords = MAX_TEXCOORDS
		# derived data
		self.boundingBox = None
		self.renderData = None



def createSkeletalVertices(positions, uvs, boneIndices = None, boneWeights = None):
	positions = numpy.asarray(positions, dtype = numpy.float32).reshape(-1, 3)
	vertexCount = len(positions)
	uvs = numpy.asarray(uvs, dtype = numpy.float32)
	if uvs.ndim != 3:
		uvs = uvs.reshape(vertexCount, -1, 2)

	paddedIndices = numpy.zeros((vertexCount, MAX_TOTAL_INFLUENCES), dtype = numpy.uint16)
	paddedWeights = numpy.zeros((vertexCount, MAX_TOTAL_INFLUENCES), dtype = numpy.float32)
	if boneIndices is not None:
		boneIndices = numpy.asarray(boneIndices, dtype = numpy.uint16)
		if boneIndices.ndim == 1:
			boneIndices = boneIndices[:, numpy.newaxis]
		paddedIndices[:, :boneIndices.shape[1]] = boneIndices
	if boneWeights is not None:
		boneWeights = numpy.asarray(boneWeights, dtype = numpy.float32)
		if boneWeights.ndim == 1:
			boneWeights = boneWeights[:, numpy.newaxis]
		paddedWeights[:, :boneWeights.shape[1]] = boneWeights
	elif boneIndices is not None:
		paddedWeights[:, 0] = 1.0

	return SkeletalMesh.Vertices(positions, uvs, paddedIndices, paddedWeights)
