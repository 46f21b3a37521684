#
# The sectioned UV channel stores which material a vertex or face used to
# have. UV space is cut into numSections vertical strips of equal width; the
# Nth consolidated material (in ascending slot order) is encoded as the
# horizontal center of the Nth strip. The vertical coordinate is left as the
# UV0 value.
#

def bucketIndex(materialSlot, consolidationSet):
	return sorted(consolidationSet).index(materialSlot)

def bucketMidpoint(bucket, numSections):
	width = 1.0 / numSections
	return bucket * width + width / 2

#
# uv0 is any array whose last axis is (u, v).
#
def encodeSectionedUVs(uv0, bucket, numSections):
	output = uv0.copy()
	output[..., 0] = bucketMidpoint(bucket, numSections)
	return output
