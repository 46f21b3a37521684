import pytest

from meshes import buildSkeletalMesh, buildStaticMesh



@pytest.fixture
def skeletalMesh():
	return buildSkeletalMesh()

@pytest.fixture
def staticMesh():
	return buildStaticMesh()
