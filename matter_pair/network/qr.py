"""
Terminal QR codes.

Two QR modules are packed into each character cell using half blocks, so
the code stays square and small enough to scan off a terminal.
"""

from typing import List

import qrcode

FULL = "█"
UPPER = "▀"
LOWER = "▄"
BLANK = " "


def qr_matrix(text: str, border: int = 2) -> List[List[bool]]:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=1,
        border=max(0, border),
    )
    qr.add_data(text)
    qr.make(fit=True)
    return qr.get_matrix()


def render_qr(text: str, invert: bool = False, border: int = 2) -> str:
    """
    Render ``text`` as a QR code made of Unicode half blocks.

    Args:
        text: Data to encode (the service URL)
        invert: Draw light modules instead of dark ones, for light-on-dark terminals
        border: Quiet zone width in modules
    """
    matrix = qr_matrix(text, border=border)
    if not matrix:
        return text

    width = len(matrix[0])
    lines = []
    for y in range(0, len(matrix), 2):
        top = matrix[y]
        bottom = matrix[y + 1] if y + 1 < len(matrix) else None
        row = []
        for x in range(width):
            t = top[x] != invert
            # Padding below an odd last row stays light
            b = bottom is not None and bottom[x] != invert
            if t and b:
                row.append(FULL)
            elif t:
                row.append(UPPER)
            elif b:
                row.append(LOWER)
            else:
                row.append(BLANK)
        lines.append("".join(row))
    return "\n".join(lines)
