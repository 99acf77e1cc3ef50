"""Configuration for scene2glsl, read from the environment (and ``.env``)."""

import os
from dotenv import load_dotenv

load_dotenv()

# Compiler
UNKNOWN_OPERATORS = os.getenv("SCENE2GLSL_UNKNOWN_OPERATORS", "defer")
UNKNOWN_OPERATOR_POLICIES = ("defer", "raise")
SCALAR_DECIMALS = 3
NOTATION_DECIMALS = 2

# Name of the query-point variable in generated shaders
COORDINATE = os.getenv("SCENE2GLSL_COORDINATE", "center")

# Logging (applied by the CLI only)
LOG_LEVEL = os.getenv("SCENE2GLSL_LOG_LEVEL", "WARNING")

# Shader defaults
DEFAULT_WIDTH = int(os.getenv("SCENE2GLSL_WIDTH", "640"))
DEFAULT_HEIGHT = int(os.getenv("SCENE2GLSL_HEIGHT", "200"))
DEFAULT_PIXEL_RATIO = float(os.getenv("SCENE2GLSL_PIXEL_RATIO", "1.0"))
BORDER_WIDTH = 0.01
BACKGROUND_COLOR = "vec4(0.5, 0.5, 0.5, 0.0)"
INTERIOR_COLOR = "vec4(0.5, 0.5, 0.5, 1.0)"
BORDER_COLOR = "vec4(0.0, 0.0, 0.0, 0.0)"

# Grid sampling defaults
DEFAULT_BOUNDS = ((-1.0, 1.0), (-1.0, 1.0))
DEFAULT_RESOLUTION = (128, 128)
