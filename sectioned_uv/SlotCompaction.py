from . import MeshData

#
# Checks a consolidation request against a mesh's material slots and returns
# the consolidation set in ascending order, without duplicates. An empty
# request consolidates every slot.
#
def validateConsolidation(materials, materialSlots, numSections, settings):
	if numSections < 2:
		raise MeshData.InvalidSectionCount("At least 2 sections are required, got %s" % numSections)

	slotCount = len(materials)
	if materialSlots is None or len(materialSlots) == 0:
		consolidationSet = list(range(slotCount))
	else:
		for materialSlot in materialSlots:
			if materialSlot < 0 or materialSlot >= slotCount:
				raise MeshData.InvalidMaterialSlot("Material slot %s does not exist, mesh has %s slots" % (materialSlot, slotCount))
		consolidationSet = sorted(set(materialSlots))

	if len(consolidationSet) == 0:
		raise MeshData.InvalidMaterialSlot("Mesh has no material slots to consolidate")

	if numSections < len(consolidationSet):
		raise MeshData.InsufficientSections("%s material slots cannot be encoded in %s sections" % (len(consolidationSet), numSections))

	for material in materials:
		if material.name == settings.consolidatedSlotName:
			raise MeshData.DuplicateReservedSlot("Mesh already has a material slot named '%s'" % settings.consolidatedSlotName)

	return consolidationSet

#
# Maps every original slot index to its index after the slots in
# consolidationSet have been collapsed into a single slot appended at the
# end. Surviving slots keep their relative order.
#
def compactSlots(slotCount, consolidationSet):
	consolidated = set(consolidationSet)
	for materialSlot in consolidated:
		if materialSlot < 0 or materialSlot >= slotCount:
			raise MeshData.InvalidMaterialSlot("Material slot %s does not exist, mesh has %s slots" % (materialSlot, slotCount))

	slotRemap = {}
	survivingCount = 0
	for materialSlot in range(slotCount):
		if materialSlot not in consolidated:
			slotRemap[materialSlot] = survivingCount
			survivingCount += 1

	for materialSlot in consolidated:
		slotRemap[materialSlot] = survivingCount

	return slotRemap

def compactMaterials(materials, consolidationSet, consolidatedName):
	consolidated = set(consolidationSet)
	output = [material for (materialSlot, material) in enumerate(materials) if materialSlot not in consolidated]
	output.append(MeshData.MaterialSlot(consolidatedName))
	return output
