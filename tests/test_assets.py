import numpy
import pytest

from sectioned_uv import Assets, MeshData, SkeletalSectionMerging



def testAllocateStorageLocation(skeletalMesh):
	assets = Assets.AssetRegistry()
	assert assets.allocateStorageLocation("/Game/Hero_sectioned") == "/Game/Hero_sectioned"

	assets.assets["/Game/Hero_sectioned"] = skeletalMesh
	assert assets.allocateStorageLocation("/Game/Hero_sectioned") == "/Game/Hero_sectioned1"

	assets.assets["/Game/Hero_sectioned1"] = skeletalMesh
	assert assets.allocateStorageLocation("/Game/Hero_sectioned") == "/Game/Hero_sectioned2"

def testDuplicateIsIndependent(skeletalMesh):
	assets = Assets.AssetRegistry()

	duplicate = assets.duplicateAsset(skeletalMesh, "/Game/Characters/Hero_sectioned")

	assert duplicate.path == "/Game/Characters/Hero_sectioned"
	assert duplicate.name == "Hero_sectioned"
	assert assets.find(duplicate.path) is None

	duplicate.lodModels[0].indexBuffer[0] = 7
	duplicate.materials.pop()
	assert skeletalMesh.lodModels[0].indexBuffer[0] == 0
	assert len(skeletalMesh.materials) == 3

def testDuplicateIntoUsedLocation(skeletalMesh):
	assets = Assets.AssetRegistry()
	assets.persistAndRegister(skeletalMesh)

	with pytest.raises(MeshData.ResourceAllocationError):
		assets.duplicateAsset(skeletalMesh, skeletalMesh.path)

def testPersistAndDiscard(skeletalMesh, staticMesh):
	assets = Assets.AssetRegistry()
	assets.persistAndRegister(skeletalMesh)
	assets.persistAndRegister(staticMesh)

	assert assets.find("/Game/Characters/Hero") is skeletalMesh
	assert assets.find("/Game/Props/Crate") is staticMesh

	assets.discardAsset(skeletalMesh)
	assert assets.find("/Game/Characters/Hero") is None
	assert assets.find("/Game/Props/Crate") is staticMesh

def testPersistConflict(skeletalMesh):
	assets = Assets.AssetRegistry()
	assets.persistAndRegister(skeletalMesh)
	assets.persistAndRegister(skeletalMesh)

	impostor = MeshData.SkeletalMesh()
	impostor.path = skeletalMesh.path
	with pytest.raises(MeshData.ResourceAllocationError):
		assets.persistAndRegister(impostor)

def testSkeletalRenderData(skeletalMesh):
	Assets.AssetRegistry().rebuildRenderResources(skeletalMesh)

	assert [(lod.numVertices, lod.numTriangles) for lod in skeletalMesh.renderData] == [(12, 6), (6, 2)]
	assert skeletalMesh.boundingBox.min.tolist() == [0, 0, 0]
	assert skeletalMesh.boundingBox.max.tolist() == [11, 0, 0]

def testSkeletalRenderDataAfterMerge(skeletalMesh):
	SkeletalSectionMerging.mergeSections(skeletalMesh, [0, 2], 8)
	Assets.AssetRegistry().rebuildRenderResources(skeletalMesh)

	assert [(lod.numVertices, lod.numTriangles) for lod in skeletalMesh.renderData] == [(12, 6), (6, 2)]

def testStaticRenderData(staticMesh):
	Assets.AssetRegistry().rebuildRenderResources(staticMesh)

	assert [(lod.numVertices, lod.numTriangles) for lod in staticMesh.renderData] == [(12, 4), (6, 2)]
	assert staticMesh.boundingBox.min.tolist() == [0, 1, 2]
	assert staticMesh.boundingBox.max.tolist() == [33, 34, 35]

def testInconsistentSkeletalLod(skeletalMesh):
	skeletalMesh.lodModels[0].sections[1].baseVertexIndex = 5

	with pytest.raises(MeshData.StructuralError) as error:
		Assets.AssetRegistry().rebuildRenderResources(skeletalMesh)

	assert "section 1 starts at vertex 5 instead of 4" in str(error.value)
	assert skeletalMesh.renderData is None

def testIndexOutsideLod(skeletalMesh):
	lodModel = skeletalMesh.lodModels[1]
	lodModel.indexBuffer = numpy.array([0, 1, 2, 3, 4, 6], dtype = numpy.uint32)

	with pytest.raises(MeshData.StructuralError):
		Assets.AssetRegistry().rebuildRenderResources(skeletalMesh)

def testUnknownAssetType():
	with pytest.raises(MeshData.StructuralError):
		Assets.AssetRegistry().rebuildRenderResources(MeshData.MaterialSlot("wood"))
