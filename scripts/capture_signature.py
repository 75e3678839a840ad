#!/usr/bin/env python3
"""Capture a handwritten signature via a GUI drawing canvas.

Opens a tkinter window where the user draws their signature with the mouse.
Saves the result as a PNG with a transparent background, trimmed to the ink.

Usage:
    python capture_signature.py <output.png> [--width 600] [--height 200]
        [--pen-color "rgb(79, 70, 229)"] [--pen-width 2]

The user can:
  - Draw with mouse (click-and-drag)
  - Pick one of the pen colours and a stroke thickness
  - Click "Clear" to start over
  - Click "Done" to save and exit
  - Close the window to cancel (exits with code 1)
"""

import argparse
import io
import json
import sys
from pathlib import Path

from PIL import Image, ImageColor, ImageDraw

from errors import EmptyContent
from extract_signature import trim_drawn_signature

PEN_COLORS = [
    "rgb(79, 70, 229)",   # indigo
    "rgb(15, 23, 42)",    # near-black
    "rgb(220, 38, 38)",   # red
    "rgb(5, 150, 105)",   # emerald
]
DEFAULT_PEN_COLOR = PEN_COLORS[0]


def parse_pen_color(value):
    """'rgb(r, g, b)' or '#rrggbb' -> (r, g, b)."""
    try:
        return ImageColor.getrgb(value)[:3]
    except (ValueError, AttributeError) as e:
        raise ValueError(f"Unrecognised pen colour: {value!r}") from e


def render_strokes(strokes, size, pen_color=DEFAULT_PEN_COLOR, pen_width=2):
    """Rasterise polylines onto a transparent canvas; returns PNG bytes."""
    width, height = size
    rgba = parse_pen_color(pen_color) + (255,)
    img = Image.new("RGBA", (width, height), (0, 0, 0, 0))
    draw = ImageDraw.Draw(img)
    for stroke in strokes:
        if len(stroke) == 1:
            x, y = stroke[0]
            r = max(1, pen_width // 2)
            draw.ellipse((x - r, y - r, x + r, y + r), fill=rgba)
        elif len(stroke) >= 2:
            draw.line(stroke, fill=rgba, width=pen_width, joint="curve")
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def capture_signature(output_path: str, width: int = 600, height: int = 200,
                      pen_color: str = DEFAULT_PEN_COLOR, pen_width: int = 2) -> bool:
    """Open a signature capture window. Returns True if signature was saved."""
    import tkinter as tk

    result = {"saved": False}
    strokes = []
    pen = {"color": pen_color, "width": pen_width}

    root = tk.Tk()
    root.title("Sign here")
    root.resizable(False, False)

    canvas = tk.Canvas(root, width=width, height=height, bg="white",
                       cursor="pencil", highlightthickness=1, highlightbackground="#999")
    canvas.pack(padx=10, pady=(10, 5))

    def tk_color(value):
        return "#%02x%02x%02x" % parse_pen_color(value)

    def on_press(event):
        strokes.append([(event.x, event.y)])

    def on_drag(event):
        if not strokes:
            return
        x0, y0 = strokes[-1][-1]
        canvas.create_line(x0, y0, event.x, event.y, fill=tk_color(pen["color"]),
                           width=pen["width"], smooth=True,
                           capstyle=tk.ROUND, joinstyle=tk.ROUND)
        strokes[-1].append((event.x, event.y))

    def clear():
        canvas.delete("all")
        strokes.clear()

    def done():
        if sum(len(s) for s in strokes) < 5:
            # Too few points: probably an accidental click
            return
        png = render_strokes(strokes, (width, height), pen["color"], pen["width"])
        try:
            mask = trim_drawn_signature(png)
        except EmptyContent:
            return
        Path(output_path).write_bytes(mask.png)
        result["saved"] = True
        root.destroy()

    def cancel():
        root.destroy()

    def set_color(value):
        pen["color"] = value

    def set_width(value):
        pen["width"] = int(float(value))

    canvas.bind("<ButtonPress-1>", on_press)
    canvas.bind("<B1-Motion>", on_drag)

    pen_frame = tk.Frame(root)
    pen_frame.pack()
    for value in PEN_COLORS:
        tk.Button(pen_frame, bg=tk_color(value), activebackground=tk_color(value), width=2,
                  command=lambda v=value: set_color(v)).pack(side=tk.LEFT, padx=3)
    thickness = tk.Scale(pen_frame, from_=1, to=8, orient=tk.HORIZONTAL, label="Thickness",
                         command=set_width, length=120)
    thickness.set(pen_width)
    thickness.pack(side=tk.LEFT, padx=(12, 0))

    btn_frame = tk.Frame(root)
    btn_frame.pack(pady=(5, 10))

    tk.Button(btn_frame, text="Clear", command=clear, width=10).pack(side=tk.LEFT, padx=5)
    tk.Button(btn_frame, text="Done", command=done, width=10).pack(side=tk.LEFT, padx=5)
    tk.Button(btn_frame, text="Cancel", command=cancel, width=10).pack(side=tk.LEFT, padx=5)

    tk.Label(root, text="Draw your signature above, then click Done",
             fg="#666", font=("Helvetica", 11)).pack(pady=(0, 8))

    root.protocol("WM_DELETE_WINDOW", cancel)
    root.mainloop()

    return result["saved"]


def main():
    parser = argparse.ArgumentParser(description="Capture a handwritten signature")
    parser.add_argument("output", help="Output PNG path")
    parser.add_argument("--width", type=int, default=600, help="Canvas width (default: 600)")
    parser.add_argument("--height", type=int, default=200, help="Canvas height (default: 200)")
    parser.add_argument("--pen-color", default=DEFAULT_PEN_COLOR, help="Pen colour")
    parser.add_argument("--pen-width", type=int, default=2, help="Pen width in pixels")
    args = parser.parse_args()

    try:
        parse_pen_color(args.pen_color)
    except ValueError as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        sys.exit(1)

    saved = capture_signature(args.output, args.width, args.height,
                              args.pen_color, args.pen_width)
    if saved:
        print(json.dumps({"status": "saved", "path": args.output}))
    else:
        print(json.dumps({"status": "cancelled"}))
        sys.exit(1)


if __name__ == "__main__":
    main()
