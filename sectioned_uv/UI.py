import bpy
import bpy.props

from . import IO, MeshData



def parseMaterialSlots(text):
	return [int(part) for part in text.replace(' ', '').split(',') if part != '']

class SECTIONED_UV_OT_Create_Sectioned_Mesh(bpy.types.Operator):
	"""Consolidate material slots of a mesh into one slot, encoding the original slot in a new UV map"""
	bl_idname = "sectioned_uv.create_sectioned_mesh"
	bl_label = "Create Sectioned Mesh"
	bl_options = {'REGISTER', 'UNDO'}

	objectName: bpy.props.StringProperty(name = "Object to section")
	material_slots: bpy.props.StringProperty(name = "Material slots", description = "Comma separated material slot indices, empty for all slots")
	num_sections: bpy.props.IntProperty(name = "Sections", default = 16, min = 2)
	lightmap_channel: bpy.props.IntProperty(name = "Lightmap UV channel", default = -1, min = -1)

	@classmethod
	def poll(cls, context):
		return context.mode == 'OBJECT' and context.active_object is not None and context.active_object.type == 'MESH'

	def invoke(self, context, event):
		self.objectName = context.active_object.name
		self.material_slots = context.scene.sectioned_uv_material_slots
		self.num_sections = context.scene.sectioned_uv_num_sections
		self.lightmap_channel = context.scene.sectioned_uv_lightmap_channel
		return self.execute(context)

	def execute(self, context):
		if self.objectName == "":
			self.objectName = context.active_object.name

		try:
			materialSlots = parseMaterialSlots(self.material_slots)
		except ValueError:
			self.report({'ERROR'}, "Material slots must be a comma separated list of numbers, got '%s'" % self.material_slots)
			return {'CANCELLED'}

		settings = MeshData.MergeSettings()
		if self.lightmap_channel >= 0:
			settings.lightMapCoordinateIndex = self.lightmap_channel

		try:
			(blenderObject, diagnostics) = IO.createSectionedBlenderMesh(context, self.objectName, materialSlots, self.num_sections, settings)
		except MeshData.SectionedUVError as error:
			self.report({'ERROR'}, "Error creating sectioned mesh (%s): %s" % (error.reason, str(error)))
			print("Error creating sectioned mesh (%s):\n%s" % (error.reason, str(error)))
			return {'CANCELLED'}

		for warning in diagnostics.warnings:
			self.report({'WARNING'}, warning)

		self.report({'INFO'}, "Created sectioned mesh '%s'." % blenderObject.name)
		return {'FINISHED'}

class SECTIONED_UV_PT_Mesh_Panel(bpy.types.Panel):
	bl_label = "Sectioned UV"
	bl_space_type = "PROPERTIES"
	bl_region_type = "WINDOW"
	bl_context = "data"

	@classmethod
	def poll(cls, context):
		return context.mesh is not None

	def draw(self, context):
		scene = context.scene

		mainColumn = self.layout.column()
		mainColumn.prop(scene, "sectioned_uv_material_slots")
		mainColumn.prop(scene, "sectioned_uv_num_sections")
		mainColumn.prop(scene, "sectioned_uv_lightmap_channel")

		row = mainColumn.row()
		row.operator_context = 'INVOKE_DEFAULT'
		row.operator(SECTIONED_UV_OT_Create_Sectioned_Mesh.bl_idname)



classes = [
	SECTIONED_UV_OT_Create_Sectioned_Mesh,
	SECTIONED_UV_PT_Mesh_Panel,
]



def register():
	bpy.types.Scene.sectioned_uv_material_slots = bpy.props.StringProperty(name = "Material slots", description = "Comma separated material slot indices, empty for all slots")
	bpy.types.Scene.sectioned_uv_num_sections = bpy.props.IntProperty(name = "Sections", default = 16, min = 2)
	bpy.types.Scene.sectioned_uv_lightmap_channel = bpy.props.IntProperty(name = "Lightmap UV channel", default = -1, min = -1)

	for c in classes:
		bpy.utils.register_class(c)

def unregister():
	for c in classes[::-1]:
		bpy.utils.unregister_class(c)

	del bpy.types.Scene.sectioned_uv_lightmap_channel
	del bpy.types.Scene.sectioned_uv_num_sections
	del bpy.types.Scene.sectioned_uv_material_slots
