import numpy
import pytest

from sectioned_uv import Assets, MeshData, SectionedMesh, SkeletalSectionMerging



def testCreateSectionedSkeletalMesh(skeletalMesh):
	assets = Assets.AssetRegistry()
	diagnostics = MeshData.Diagnostics()

	sectionedMesh = SectionedMesh.createSectionedSkeletalMesh(skeletalMesh, [0, 2], 8, assets, None, diagnostics)

	assert sectionedMesh is not skeletalMesh
	assert sectionedMesh.path == "/Game/Characters/Hero_sectioned"
	assert sectionedMesh.name == "Hero_sectioned"
	assert assets.find(sectionedMesh.path) is sectionedMesh
	assert [material.name for material in sectionedMesh.materials] == ["cloth", "sectioned"]
	assert [(lod.numVertices, lod.numTriangles) for lod in sectionedMesh.renderData] == [(12, 6), (6, 2)]
	assert diagnostics.messages[-1] == "Created sectioned mesh '/Game/Characters/Hero_sectioned'"

def testSourceMeshIsUntouched(skeletalMesh):
	indexBuffers = [lodModel.indexBuffer.copy() for lodModel in skeletalMesh.lodModels]

	SectionedMesh.createSectionedSkeletalMesh(skeletalMesh, [0, 2], 8)

	assert [material.name for material in skeletalMesh.materials] == ["skin", "cloth", "hair"]
	for (lodModel, indexBuffer) in zip(skeletalMesh.lodModels, indexBuffers):
		assert numpy.array_equal(lodModel.indexBuffer, indexBuffer)
		assert lodModel.numTexCoords == 1
	assert len(skeletalMesh.lodModels[0].sections) == 3
	assert skeletalMesh.morphTargets[0].lodModels[0].sourceIndices.tolist() == [1, 5, 7, 11]

def testRepeatedRunsUseFreshLocations(skeletalMesh):
	assets = Assets.AssetRegistry()

	first = SectionedMesh.createSectionedSkeletalMesh(skeletalMesh, [0, 2], 8, assets)
	second = SectionedMesh.createSectionedSkeletalMesh(skeletalMesh, [0, 2], 8, assets)

	assert first.path == "/Game/Characters/Hero_sectioned"
	assert second.path == "/Game/Characters/Hero_sectioned1"
	assert assets.find(first.path) is first
	assert assets.find(second.path) is second

def testSectioningSectionedMeshFails(skeletalMesh):
	assets = Assets.AssetRegistry()
	sectionedMesh = SectionedMesh.createSectionedSkeletalMesh(skeletalMesh, [0, 2], 8, assets)

	with pytest.raises(MeshData.DuplicateReservedSlot):
		SectionedMesh.createSectionedSkeletalMesh(sectionedMesh, [1], 8, assets)

	assert list(assets.assets.keys()) == ["/Game/Characters/Hero_sectioned"]

def testFailedMergeRegistersNothing(skeletalMesh):
	skeletalMesh.lodModels[0].sections[0].clothBinding = MeshData.ClothBinding("cape", 0)
	assets = Assets.AssetRegistry()

	with pytest.raises(MeshData.UnremovableSection):
		SectionedMesh.createSectionedSkeletalMesh(skeletalMesh, [0, 2], 8, assets)

	assert assets.assets == {}
	assert len(skeletalMesh.materials) == 3

def testFailedRenderRebuildRegistersNothing(skeletalMesh):
	def corruptingMerge(mesh, materialSlots, numSections, settings, diagnostics):
		SkeletalSectionMerging.mergeSections(mesh, materialSlots, numSections, settings, diagnostics)
		mesh.lodModels[0].numVertices += 1

	assets = Assets.AssetRegistry()
	with pytest.raises(MeshData.StructuralError):
		SectionedMesh.createSectionedMesh(skeletalMesh, [0, 2], 8, assets, None, None, corruptingMerge)

	assert assets.assets == {}

def testValidationFailsBeforeAllocation(skeletalMesh):
	class CountingRegistry(Assets.AssetRegistry):
		def __init__(self):
			Assets.AssetRegistry.__init__(self)
			self.duplicates = 0

		def duplicateAsset(self, source, path):
			self.duplicates += 1
			return Assets.AssetRegistry.duplicateAsset(self, source, path)

	assets = CountingRegistry()
	with pytest.raises(MeshData.InvalidSectionCount):
		SectionedMesh.createSectionedSkeletalMesh(skeletalMesh, [0, 2], 1, assets)

	assert assets.duplicates == 0

def testDuplicationFailure(skeletalMesh):
	class FullRegistry(Assets.AssetRegistry):
		def duplicateAsset(self, source, path):
			return None

	with pytest.raises(MeshData.ResourceAllocationError):
		SectionedMesh.createSectionedSkeletalMesh(skeletalMesh, [0, 2], 8, FullRegistry())

def testMissingMesh():
	with pytest.raises(MeshData.InputValidationError):
		SectionedMesh.createSectionedSkeletalMesh(None, [0], 8)
	with pytest.raises(MeshData.InputValidationError):
		SectionedMesh.createSectionedStaticMesh(None, [0], 8)

def testWrongMeshKind(skeletalMesh, staticMesh):
	with pytest.raises(MeshData.InputValidationError):
		SectionedMesh.createSectionedStaticMesh(skeletalMesh, [0], 8)
	with pytest.raises(MeshData.InputValidationError):
		SectionedMesh.createSectionedSkeletalMesh(staticMesh, [0], 8)

def testCreateSectionedStaticMesh(staticMesh):
	assets = Assets.AssetRegistry()

	sectionedMesh = SectionedMesh.createSectionedStaticMesh(staticMesh, [0, 2], 8, assets)

	assert sectionedMesh.path == "/Game/Props/Crate_sectioned"
	assert assets.find("/Game/Props/Crate_sectioned") is sectionedMesh
	assert sectionedMesh.lodModels[0].faceMaterialIndices.tolist() == [1, 0, 1, 1]
	assert [(lod.numVertices, lod.numTriangles) for lod in sectionedMesh.renderData] == [(12, 4), (6, 2)]
	assert staticMesh.lodModels[0].faceMaterialIndices.tolist() == [0, 1, 2, 0]
	assert staticMesh.lodModels[0].numTexCoords == 1

def testDefaultSectionCount(staticMesh):
	sectionedMesh = SectionedMesh.createSectionedStaticMesh(staticMesh, [0, 2])

	assert sectionedMesh.lodModels[0].uvs[1, 0, :, 0] == pytest.approx([1 / 32] * 3)

def testStorageSuffixSetting(staticMesh):
	settings = MeshData.MergeSettings()
	settings.storageSuffix = "_atlas"

	sectionedMesh = SectionedMesh.createSectionedStaticMesh(staticMesh, [0, 2], 8, None, settings)

	assert sectionedMesh.path == "/Game/Props/Crate_atlas"
	assert sectionedMesh.name == "Crate_atlas"

def testMeshWithoutPath(staticMesh):
	staticMesh.path = None

	sectionedMesh = SectionedMesh.createSectionedStaticMesh(staticMesh, [0, 2], 8)

	assert sectionedMesh.path == "/Crate_sectioned"
