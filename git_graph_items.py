# git_graph_items.py

from PyQt6.QtCore import QPointF
from PyQt6.QtGui import QColor, QPainterPath

from git_graph_data import CONNECTION_STRAIGHT, GraphConnection, GraphLayout

# --- Default geometry (callers usually take these from settings) ---
ROW_HEIGHT = 40
RAIL_WIDTH = 20
NODE_RADIUS = 6

# Colors, cycled by rail index
RAIL_COLORS = [
    QColor("#6bcaf7"),  # cyan
    QColor("#f76b6b"),  # red
    QColor("#6bf78e"),  # green
    QColor("#f7a86b"),  # orange
    QColor("#b76bf7"),  # purple
    QColor("#f76bb7"),  # pink
    QColor("#b7f76b"),  # olive
    QColor("#c4a8ff"),  # lavender
]


def rail_color(rail: int) -> QColor:
    return RAIL_COLORS[rail % len(RAIL_COLORS)]


def node_center(rail: int, row: int, rail_width: float = RAIL_WIDTH, row_height: float = ROW_HEIGHT) -> QPointF:
    return QPointF((rail + 0.5) * rail_width, row * row_height + row_height / 2)


def graph_size(
    layout: GraphLayout, rail_width: float = RAIL_WIDTH, row_height: float = ROW_HEIGHT
) -> tuple[float, float]:
    """Width and height a surface needs to draw the whole layout (one spare rail of margin)."""
    return (layout.rail_count + 1) * rail_width, len(layout.nodes) * row_height


def connection_path(
    connection: GraphConnection,
    rail_width: float = RAIL_WIDTH,
    row_height: float = ROW_HEIGHT,
    node_radius: float = NODE_RADIUS,
) -> QPainterPath:
    """
    Builds the line from a child commit down to its parent.

    Straight connections are a vertical line between the two circles. Merges
    between adjacent rows are a single curve; longer ones run down the
    child's rail and only bend into the parent's rail over the last row.
    The line should be stroked with the child's rail color.
    """
    start = node_center(connection.from_rail, connection.from_row, rail_width, row_height)
    end = node_center(connection.to_rail, connection.to_row, rail_width, row_height)

    path = QPainterPath()
    path.moveTo(start.x(), start.y() + node_radius)

    if connection.kind == CONNECTION_STRAIGHT:
        path.lineTo(end.x(), end.y() - node_radius)
        return path

    if connection.from_row + 1 == connection.to_row:
        mid_y = (start.y() + end.y()) / 2
        path.cubicTo(start.x(), mid_y, end.x(), mid_y, end.x(), end.y() - node_radius)
    else:
        curve_start_y = end.y() - row_height
        path.lineTo(start.x(), curve_start_y)
        path.cubicTo(
            start.x(),
            curve_start_y + row_height * 0.5,
            end.x(),
            curve_start_y + row_height * 0.5,
            end.x(),
            end.y() - node_radius,
        )
    return path
