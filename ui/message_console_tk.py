# ui/message_console_tk.py

import base64
import itertools
import json
import threading
import time
import tkinter as tk
from tkinter import ttk

from infra.logging import get_logger
from infra.path_helper import get_data_path

DEFAULT_SETTINGS = {
    "font_family": "Arial",
    "font_size": 13,
    "player_bold": True,
    "image_subsample": 4,
}

# age-bracket themes: (background, text, player/accent)
THEMES = {
    "theme-default": ("#1e1e2e", "#ffffff", "#ffd166"),
    "theme-younger": ("#3a1d6e", "#fff8e7", "#ffd166"),
    "theme-middle": ("#123c69", "#f1f7ff", "#7bdff2"),
    "theme-older": ("#1b1b1b", "#e8e8e8", "#9ef01a"),
}


def load_ui_settings() -> dict:
    path = get_data_path("ui_settings.json")
    settings = DEFAULT_SETTINGS.copy()
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            settings.update(json.load(f))
    return settings


def save_ui_settings(settings: dict):
    path = get_data_path("ui_settings.json")
    with open(path, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2, ensure_ascii=False)


def decode_data_url(url: str) -> str | None:
    """Base64 payload of a PNG data URL (what tk.PhotoImage accepts), or None."""
    prefix = "data:image/png;base64,"
    if not url or not url.startswith(prefix):
        return None
    payload = url[len(prefix):]
    try:
        base64.b64decode(payload, validate=True)
    except ValueError:
        return None
    return payload


class GUISpinner:
    def __init__(self, label_widget, message="Thinking...", interval=0.3):
        self.label = label_widget
        self.frames = itertools.cycle(["*   ", " *  ", "  * ", "   *"])
        self.message = message
        self.interval = interval
        self._stop_event = threading.Event()
        self._thread = None

    def _animate(self, stop_event: threading.Event):
        while not stop_event.is_set():
            frame = next(self.frames)
            self.label.after(0, self.label.config, {"text": f"{frame} {self.message}"})
            time.sleep(self.interval)
        self.label.after(0, self.label.config, {"text": ""})

    def start(self):
        self.stop()
        self._stop_event = threading.Event()
        self._thread = threading.Thread(target=self._animate, args=(self._stop_event,), daemon=True)
        self._thread.start()

    def stop(self):
        # no join: the animation thread marshals into the Tk thread, which is usually the caller
        self._stop_event.set()
        self._thread = None


class MessageConsole_tk:
    def __init__(self):
        self.settings = load_ui_settings()
        self.log = get_logger("UI")
        self.theme = "theme-default"
        self._images = []  # PhotoImage objects must stay referenced

        self.root = tk.Tk()
        self.root.title("Becom.AI")
        self.root.geometry("1100x800")

        self.root.grid_rowconfigure(0, weight=1)
        self.root.grid_rowconfigure(1, weight=0)
        self.root.grid_columnconfigure(0, weight=1)

        self.message_frame = tk.Frame(self.root)
        self.message_frame.grid(row=0, column=0, sticky="nsew", padx=10, pady=(10, 0))

        self.scrollbar = tk.Scrollbar(self.message_frame)
        self.scrollbar.pack(side="right", fill="y")

        self.message_area = tk.Text(
            self.message_frame,
            yscrollcommand=self.scrollbar.set,
            state="disabled",
            wrap="word",
            bd=0,
            highlightthickness=0,
            relief="flat",
        )
        self.message_area.pack(side="left", expand=True, fill="both")
        self.scrollbar.config(command=self.message_area.yview)

        self.bottom_frame = tk.Frame(self.root)
        self.bottom_frame.grid(row=1, column=0, sticky="ew")

        self.spinner_label = tk.Label(self.bottom_frame, text="")
        self.spinner_label.pack_forget()
        self.spinner = GUISpinner(self.spinner_label)

        self.entry = tk.Text(self.bottom_frame, height=3, bd=0, highlightthickness=0, relief="flat", state="disabled")
        self.entry.bind("<Return>", self._on_enter_text)
        self.entry.bind("<Shift-Return>", lambda e: None)
        self.entry.pack_forget()

        self.input_callback = None

        menu = tk.Menu(self.root)
        self.root.config(menu=menu)
        config_menu = tk.Menu(menu, tearoff=0)
        menu.add_cascade(label="Settings", menu=config_menu)
        config_menu.add_command(label="Text...", command=self.open_settings_window)

        self.apply_settings()

    # ---------- output ----------

    def print_message(self, sender: str, message: str):
        is_player = sender and sender.lower() in ["user", "player"]
        tag = "player" if is_player else "default"
        line = f"> {message}\n" if is_player else f"{message}\n\n"

        self.message_area.configure(state="normal")
        self.message_area.insert("end", line, tag)
        self.message_area.configure(state="disabled")
        self.message_area.see("end")

    def safe_print(self, sender, message):
        self.root.after(0, lambda: self.print_message(sender, message))

    def show_image(self, caption: str, url: str):
        self.root.after(0, lambda: self._insert_image(caption, url))

    def _insert_image(self, caption: str, url: str):
        payload = decode_data_url(url)
        if payload is None:
            return
        try:
            image = tk.PhotoImage(data=payload)
        except tk.TclError as e:
            self.log.warning(f"[Image] could not display '{caption}': {e}")
            return
        factor = max(1, int(self.settings.get("image_subsample", 4)))
        image = image.subsample(factor, factor)
        self._images.append(image)

        self.message_area.configure(state="normal")
        self.message_area.image_create("end", image=image, padx=4, pady=4)
        if caption:
            self.message_area.insert("end", f"  {caption}", "default")
        self.message_area.insert("end", "\n")
        self.message_area.configure(state="disabled")
        self.message_area.see("end")

    # ---------- input ----------

    def wait_for_input(self, on_input_received):
        def _setup():
            self.input_callback = on_input_received
            self.stop_spinner()
            self.entry.config(state="normal")
            self.entry.delete("1.0", "end")
            self.entry.pack(side="top", padx=10, pady=(5, 10), fill="x")
            self.entry.focus()
            self.message_area.see("end")
        self.root.after(0, _setup)

    def _on_enter_text(self, event):
        if event.state & 0x0001:
            return
        value = self.entry.get("1.0", "end-1c")
        self.log.debug(f"[InputRaw] repr={repr(value)}")

        if self.input_callback:
            cb = self.input_callback
            self.input_callback = None
            self.entry.delete("1.0", "end")
            self.entry.pack_forget()
            if value.strip():
                self.print_message("Player", value)
            cb(value)
        return "break"

    def start_spinner(self):
        def _setup():
            self.entry.pack_forget()
            self.spinner_label.pack(padx=10, pady=(5, 5), anchor="w")
            self.spinner.start()
        self.root.after(0, _setup)

    def stop_spinner(self):
        self.spinner.stop()
        self.spinner_label.pack_forget()

    def run(self):
        self.root.mainloop()

    # ---------- look ----------

    def apply_theme(self, theme: str):
        self.theme = theme if theme in THEMES else "theme-default"
        self.root.after(0, self.apply_settings)

    def apply_settings(self):
        bg, fg, accent = THEMES[self.theme]
        family, size = self.settings["font_family"], self.settings["font_size"]
        font = (family, size)

        self.root.config(bg=bg)
        self.message_frame.config(bg=bg)
        self.bottom_frame.config(bg=bg)
        self.message_area.config(font=font, bg=bg, fg=fg, insertbackground=fg)
        self.message_area.tag_config("default", foreground=fg)
        self.message_area.tag_config(
            "player",
            foreground=accent,
            font=(family, size, "bold" if self.settings.get("player_bold", True) else "normal"),
        )
        self.spinner_label.config(font=font, bg=bg, fg=accent)
        self.entry.config(font=(family, size + 2), bg="#2a2a2a", fg=fg, insertbackground=fg)

    def open_settings_window(self):
        win = tk.Toplevel(self.root)
        win.title("Text settings")
        win.resizable(False, False)

        tk.Label(win, text="Font:").grid(row=0, column=0, sticky="w", padx=10, pady=5)
        font_var = tk.StringVar(value=self.settings["font_family"])
        ttk.Combobox(
            win, textvariable=font_var, values=["Arial", "Comic Sans MS", "Verdana", "Consolas"], state="readonly"
        ).grid(row=0, column=1, padx=10, pady=5)

        tk.Label(win, text="Size:").grid(row=1, column=0, sticky="w", padx=10, pady=5)
        size_var = tk.StringVar(value=str(self.settings["font_size"]))
        tk.Spinbox(win, from_=8, to=32, textvariable=size_var, width=5).grid(row=1, column=1, padx=10, pady=5, sticky="w")

        bold_var = tk.BooleanVar(value=self.settings.get("player_bold", True))
        tk.Checkbutton(win, text="Bold for my answers", variable=bold_var).grid(
            row=2, column=0, columnspan=2, sticky="w", padx=10, pady=5
        )

        def apply():
            self.settings["font_family"] = font_var.get()
            self.settings["font_size"] = int(size_var.get())
            self.settings["player_bold"] = bool(bold_var.get())
            save_ui_settings(self.settings)
            self.apply_settings()
            win.destroy()

        tk.Button(win, text="Apply", command=apply).grid(row=3, column=0, columnspan=2, pady=15)
