"""Parameter names shared by the step kinds."""

MODE = "mode"
ORIGIN_MODE = "origin_mode"
COLOR_IMAGE = "color_image"
BYTE_MAP = "byte_map"
WIDTH = "width"
HEIGHT = "height"
X = "x"
Y = "y"
CLIPPING_AREA = "clipping_area"
CLIPPING_GRID = "clipping_grid"
FUNCTION = "function"
CHANNEL_MODE = "channel_mode"
CHANNEL_ORDER = "channel_order"
SHAPES = "shapes"
DRAW_MODE = "draw_mode"
THICKNESS = "thickness"
RED = "red"
GREEN = "green"
BLUE = "blue"
RADIUS = "radius"
TARGET = "target"
