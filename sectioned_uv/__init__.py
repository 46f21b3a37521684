bl_info = {
	"name": "Sectioned UV mesh tools",
	"blender": (2, 80, 0),
	"category": "Mesh",
	"version": (0, 1, 0),
}

#
# Blender modules are only imported when the add-on is registered, so that
# the mesh processing modules can be used without Blender.
#

def register():
	from . import UI
	UI.register()

def unregister():
	from . import UI
	UI.unregister()
