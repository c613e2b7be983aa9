"""Probability heatmap rendering."""

from PIL import Image, ImageDraw, ImageFont

from board import CellContent


# Color constants for revealed contents; undug cells use the probability gradient
COLORS = {
    CellContent.GREEN: (0, 200, 0),
    CellContent.BLUE: (0, 120, 215),
    CellContent.RED: (220, 50, 50),
    CellContent.SILVER: (200, 200, 200),
    CellContent.GOLD: (255, 215, 0),
    CellContent.RUPOOR: (80, 0, 80),
    CellContent.BOMB: (50, 50, 50),
}

BACKGROUND = (30, 30, 40)
SAFE = (100, 220, 60)
DANGER = (220, 40, 40)

CELL_PADDING = 6


def prob_color(prob: float) -> tuple:
    """Map a bad probability onto a green -> yellow -> red gradient.

    Args:
        prob: Probability in [0, 1].

    Returns:
        RGB tuple.
    """
    if prob <= 0.0:
        return SAFE
    if prob >= 1.0:
        return DANGER
    if prob < 0.5:
        t = prob / 0.5
        rgb = (100 + t * 155, 220 - t * 30, 60 - t * 40)
    else:
        t = (prob - 0.5) / 0.5
        rgb = (255 - t * 35, 190 - t * 150, 20 + t * 20)
    return tuple(min(255, max(0, int(v))) for v in rgb)


def cell_color(content: CellContent, prob: float) -> tuple:
    """Background for a cell: the gradient while undug, the content's color after."""
    if content is CellContent.UNDUG:
        return prob_color(prob)
    return COLORS[content]


def text_color(background: tuple) -> tuple:
    """Dark text on light backgrounds, light text on dark ones."""
    r, g, b = background
    brightness = (r * 299 + g * 587 + b * 114) // 1000
    return (30, 30, 30) if brightness > 128 else (240, 240, 240)


def cell_label(content: CellContent, prob: float) -> str:
    if content is CellContent.UNDUG:
        return f"{round(prob * 100)}% Bad"
    return content.value.capitalize()


def render_heatmap(solver, cell_size: int = 80) -> Image.Image:
    """Draw the board with every cell colored by its state.

    Args:
        solver: Solver whose cells and probabilities are drawn.
        cell_size: Side of one cell in pixels, padding included.

    Returns:
        PIL Image of solver.cols x solver.rows cells.
    """
    width = solver.cols * cell_size + CELL_PADDING
    height = solver.rows * cell_size + CELL_PADDING
    img = Image.new('RGB', (width, height), BACKGROUND)
    draw = ImageDraw.Draw(img)
    font = ImageFont.load_default()

    for row in range(solver.rows):
        for col in range(solver.cols):
            content = solver.cell(row, col)
            prob = solver.probability(row, col)
            bg = cell_color(content, prob)

            x0 = col * cell_size + CELL_PADDING
            y0 = row * cell_size + CELL_PADDING
            x1 = x0 + cell_size - CELL_PADDING - 1
            y1 = y0 + cell_size - CELL_PADDING - 1
            draw.rectangle([(x0, y0), (x1, y1)], fill=bg)

            label = cell_label(content, prob)
            left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
            tx = (x0 + x1 - (right - left)) // 2
            ty = (y0 + y1 - (bottom - top)) // 2
            draw.text((tx, ty), label, fill=text_color(bg), font=font)

    return img


def save_heatmap(solver, path: str, cell_size: int = 80):
    """Render the board and write it to an image file."""
    render_heatmap(solver, cell_size).save(path)
