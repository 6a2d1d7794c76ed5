"""Shared pytest fixtures for the Areatrace test suite.

Fixtures:
    params: Editor defaults with a small canvas
    editor: Fresh EditorContext in straight-drawing mode
    square_points: Four corners of the canonical 40x40 square
    drawn_square: Editor holding one committed square region (Area_1)
    square_region: A committed Region built directly from models
    curved_region: A Region with one quadratic vertex
    scene: Scene holding square_region and curved_region
"""

import pytest

from controllers.editor import EditorContext
from models.geo import Background, Canvas_Size, Region, Scene, Vertex
from models.geometry import Point
from models.params import Params


@pytest.fixture
def params():
    return Params(width=200, height=100)


@pytest.fixture
def editor(params):
    return EditorContext(params)


@pytest.fixture
def square_points():
    return [Point(10, 10), Point(50, 10), Point(50, 50), Point(10, 50)]


@pytest.fixture
def drawn_square(editor, square_points):
    for p in square_points:
        editor.click(p)
    editor.finalize()
    return editor


@pytest.fixture
def square_region():
    return Region(
        id="Area_1",
        vertices=[Vertex(x=10, y=10), Vertex(x=50, y=10), Vertex(x=50, y=50), Vertex(x=10, y=50)],
        fill_color="#ff0000",
        fill_opacity=0.5,
    )


@pytest.fixture
def curved_region():
    return Region(
        id="Area_2",
        vertices=[
            Vertex(x=100, y=20),
            Vertex(x=160, y=20, is_curve=True, control_x=130, control_y=0),
            Vertex(x=160, y=80),
        ],
        fill_color="#00ff00",
        fill_opacity=0.25,
        label="Hall & <Lobby>",
    )


@pytest.fixture
def background():
    return Background(image_data="data:image/png;base64,AAAA", width=640, height=480)


@pytest.fixture
def scene(square_region, curved_region):
    return Scene(regions=[square_region, curved_region], canvas_size=Canvas_Size(width=200, height=100))
