"""
Spore Viewer
在显微图片上手动测量孢子长短轴，按标定换算为微米并生成统计。
依赖: Pillow, matplotlib, numpy, scipy
"""

import csv
import logging
import math
import os
import tkinter as tk
from tkinter import ttk, colorchooser, filedialog, messagebox, simpledialog

import numpy as np
from PIL import Image, ImageTk
import matplotlib
matplotlib.use("TkAgg")
from matplotlib.backends.backend_tkagg import FigureCanvasTkAgg, NavigationToolbar2Tk
from matplotlib.figure import Figure
from scipy.stats import norm

from . import config
from .calibration import CalibrationRegistry
from .errors import MalformedImportError, StorageFailure
from .session import ClickOutcome, MeasurementSession
from .statistics import SUPPORTED_UNITS, compute_statistics, convert_length, write_blob_csv
from .storage import JsonFileStore, load_preferences, save_preferences
from .strings import translate
from .transform import ViewTransform

logger = logging.getLogger(__name__)


class TkPrompt:
    """基于 simpledialog / messagebox 的阻塞式输入。"""

    def __init__(self, parent, title):
        self.parent = parent
        self.title = title

    def ask_number(self, message):
        return simpledialog.askfloat(self.title, message, parent=self.parent)

    def ask_text(self, message):
        return simpledialog.askstring(self.title, message, parent=self.parent)

    def confirm(self, message):
        return messagebox.askyesno(self.title, message, parent=self.parent)


class SporeViewerApp(tk.Tk):
    def __init__(self, store):
        super().__init__()
        self.title("Spore Viewer")
        self.geometry("1200x800")
        self.minsize(900, 600)

        self.lang = "zh"

        # ---- 持久化状态 ----
        self.store = store
        self.registry = CalibrationRegistry(store)
        try:
            store.load()
            self.registry.load()
        except StorageFailure as exc:
            logger.error("Settings could not be loaded: %s", exc)
            self._startup_error = exc
        else:
            self._startup_error = None
        self.prefs = load_preferences(store)

        # ---- 图像与视图 ----
        self.pil_image = None
        self.tk_image = None
        self.img_w = 0
        self.img_h = 0
        self.view = ViewTransform.identity()
        self.display_unit = "μm"

        self.session = MeasurementSession(self.registry, to_image_space=self._canvas_to_img)

        self._press_pos = None
        self._pan_start = None
        self._dragged = False

        self._build_ui()
        self._bind_shortcuts()
        self._refresh_calibrations()
        self._refresh_list()

        if self._startup_error is not None:
            self.after(100, lambda: messagebox.showerror(
                self._t("error"), self._t("storage_fail", e=self._startup_error)))

    def _t(self, key, **kwargs):
        return translate(key, self.lang, **kwargs)

    # ------------------------------------------------------------------ UI
    def _build_ui(self):
        self.menubar = tk.Menu(self, tearoff=0)
        self.config(menu=self.menubar)

        self.file_menu = tk.Menu(self.menubar, tearoff=0)
        self.menubar.add_cascade(label="File", menu=self.file_menu)
        self.file_menu.add_command(label=self._t("open_image"), command=self.open_image)
        self.file_menu.add_command(label=self._t("export_csv"), command=self.export_csv)
        self.file_menu.add_separator()
        self.file_menu.add_command(label=self._t("import_cal"), command=self.import_calibrations)
        self.file_menu.add_command(label=self._t("export_cal"), command=self.export_calibrations)

        self.settings_menu = tk.Menu(self.menubar, tearoff=0)
        self.menubar.add_cascade(label=self._t("settings"), menu=self.settings_menu)
        self.settings_menu.add_command(label=self._t("bg_color"),
                                       command=lambda: self.choose_color("background_color"))
        self.settings_menu.add_command(label=self._t("scale_bar_color"),
                                       command=lambda: self.choose_color("scale_bar_color"))

        # -- 工具栏 --
        self.toolbar = ttk.Frame(self, padding=2)
        self.toolbar.pack(side=tk.TOP, fill=tk.X)

        btn_cfg = dict(padding=(8, 2))
        self.buttons = {}
        for key, command in (("open_image", self.open_image),
                             ("spore_mode", lambda: self.set_mode(False)),
                             ("scale_mode", lambda: self.set_mode(True)),
                             ("distribution", self.show_histogram),
                             ("export_csv", self.export_csv),
                             ("fit_window", self.fit_to_window),
                             ("reset", self.reset_all)):
            btn = ttk.Button(self.toolbar, text=self._t(key), command=command, **btn_cfg)
            btn.pack(side=tk.LEFT, padx=2)
            self.buttons[key] = btn

        ttk.Separator(self.toolbar, orient=tk.VERTICAL).pack(side=tk.LEFT, fill=tk.Y, padx=6)
        self.btn_lang = ttk.Button(self.toolbar, text="EN", command=self._toggle_lang, **btn_cfg)
        self.btn_lang.pack(side=tk.LEFT, padx=2)

        # -- 主区域 --
        body = ttk.PanedWindow(self, orient=tk.HORIZONTAL)
        body.pack(side=tk.TOP, fill=tk.BOTH, expand=True)

        canvas_frame = ttk.Frame(body)
        self.canvas = tk.Canvas(canvas_frame, bg=self.prefs.background_color,
                                width=config.CANVAS_WIDTH, height=config.CANVAS_HEIGHT,
                                highlightthickness=0)
        self.canvas.pack(fill=tk.BOTH, expand=True)
        body.add(canvas_frame, weight=3)

        self.right_panel = ttk.Frame(body, width=300)
        self._build_right_panel(self.right_panel)
        body.add(self.right_panel, weight=0)

        # -- 状态栏 --
        self.status_var = tk.StringVar(value=self._t("ready"))
        ttk.Label(self, textvariable=self.status_var, relief=tk.SUNKEN,
                  anchor=tk.W, padding=(4, 2)).pack(side=tk.BOTTOM, fill=tk.X)

        # -- 画布事件 --
        self.canvas.bind("<ButtonPress-1>", self._on_left_press)
        self.canvas.bind("<B1-Motion>", self._on_left_drag)
        self.canvas.bind("<ButtonRelease-1>", self._on_left_release)
        self.canvas.bind("<ButtonPress-3>", self._on_right_click)
        self.canvas.bind("<MouseWheel>", self._on_scroll)
        self.canvas.bind("<Button-4>", lambda e: self._zoom_at(e.x, e.y, config.ZOOM_STEP))
        self.canvas.bind("<Button-5>", lambda e: self._zoom_at(e.x, e.y, 1 / config.ZOOM_STEP))
        self.canvas.bind("<Motion>", self._on_motion)
        self.canvas.bind("<Configure>", lambda e: self._render())

    def _build_right_panel(self, parent):
        self.lf_cal = ttk.LabelFrame(parent, text=self._t("calibration"), padding=6)
        self.lf_cal.pack(fill=tk.X, padx=4, pady=(4, 2))
        self.cal_var = tk.StringVar()
        self.cal_combo = ttk.Combobox(self.lf_cal, textvariable=self.cal_var,
                                      state="readonly", width=28)
        self.cal_combo.pack(fill=tk.X)
        self.cal_combo.bind("<<ComboboxSelected>>", self._on_calibration_change)
        self.btn_remove_cal = ttk.Button(self.lf_cal, text=self._t("remove_cal"),
                                         command=self.remove_calibration)
        self.btn_remove_cal.pack(anchor=tk.W, pady=(4, 0))

        unit_frame = ttk.Frame(self.lf_cal)
        unit_frame.pack(fill=tk.X, pady=(4, 0))
        self.display_unit_label = ttk.Label(unit_frame, text=self._t("display_unit") + ":")
        self.display_unit_label.pack(side=tk.LEFT)
        self.display_unit_var = tk.StringVar(value=self.display_unit)
        self.display_unit_combo = ttk.Combobox(unit_frame, textvariable=self.display_unit_var,
                                               values=SUPPORTED_UNITS, width=6, state="readonly")
        self.display_unit_combo.pack(side=tk.LEFT, padx=5)
        self.display_unit_combo.bind("<<ComboboxSelected>>", self._on_display_unit_change)

        self.lf_list = ttk.LabelFrame(parent, text=self._t("blob_list"), padding=4)
        self.lf_list.pack(fill=tk.BOTH, expand=True, padx=4, pady=2)

        cols = ("col_id", "col_axis_a", "col_axis_b")
        self.tree = ttk.Treeview(self.lf_list, columns=cols, show="headings",
                                 height=12, selectmode="extended")
        for col, width in zip(cols, (40, 100, 100)):
            self.tree.column(col, width=width, anchor=tk.CENTER)
        sb = ttk.Scrollbar(self.lf_list, orient=tk.VERTICAL, command=self.tree.yview)
        self.tree.configure(yscrollcommand=sb.set)
        self.tree.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        sb.pack(side=tk.RIGHT, fill=tk.Y)

        self.btn_row = ttk.Frame(parent)
        self.btn_row.pack(fill=tk.X, padx=4)
        self.btn_del = ttk.Button(self.btn_row, text=self._t("delete_sel"),
                                  command=self.delete_selected)
        self.btn_del.pack(side=tk.LEFT, padx=2)
        self.btn_clear = ttk.Button(self.btn_row, text=self._t("clear_all"),
                                    command=self.clear_all)
        self.btn_clear.pack(side=tk.LEFT, padx=2)

        self.lf_stat = ttk.LabelFrame(parent, text=self._t("statistics"), padding=6)
        self.lf_stat.pack(fill=tk.X, padx=4, pady=2)
        self.stat_label = ttk.Label(self.lf_stat, text=f'{self._t("count")}: 0',
                                    justify=tk.LEFT, wraplength=280)
        self.stat_label.pack(anchor=tk.W)

        self.lf_notes = ttk.LabelFrame(parent, text=self._t("notes"), padding=4)
        self.lf_notes.pack(fill=tk.X, padx=4, pady=(2, 4))
        self.notes_text = tk.Text(self.lf_notes, height=4, width=30, wrap=tk.WORD)
        self.notes_text.pack(fill=tk.X)
        self.notes_text.insert("1.0", self.prefs.notes)
        self.notes_text.bind("<FocusOut>", self._on_notes_change)

    def _toggle_lang(self):
        self.lang = "en" if self.lang == "zh" else "zh"
        self.btn_lang.config(text="EN" if self.lang == "zh" else "中文")
        for key, btn in self.buttons.items():
            btn.config(text=self._t(key))
        self.file_menu.entryconfig(0, label=self._t("open_image"))
        self.file_menu.entryconfig(1, label=self._t("export_csv"))
        self.file_menu.entryconfig(3, label=self._t("import_cal"))
        self.file_menu.entryconfig(4, label=self._t("export_cal"))
        self.menubar.entryconfig(1, label=self._t("settings"))
        self.settings_menu.entryconfig(0, label=self._t("bg_color"))
        self.settings_menu.entryconfig(1, label=self._t("scale_bar_color"))
        self.lf_cal.config(text=self._t("calibration"))
        self.btn_remove_cal.config(text=self._t("remove_cal"))
        self.display_unit_label.config(text=self._t("display_unit") + ":")
        self.lf_list.config(text=self._t("blob_list"))
        self.btn_del.config(text=self._t("delete_sel"))
        self.btn_clear.config(text=self._t("clear_all"))
        self.lf_stat.config(text=self._t("statistics"))
        self.lf_notes.config(text=self._t("notes"))
        self._refresh_calibrations()
        self._refresh_list()
        self._update_status_idle()

    def _mode_text(self):
        return self._t("scale_mode") if self.session.calibration_mode else self._t("spore_mode")

    def _bind_shortcuts(self):
        self.bind("<Control-o>", lambda e: self.open_image())
        self.bind("<Control-s>", lambda e: self.export_csv())
        self.bind("<Control-z>", lambda e: self.undo())
        self.bind("<Escape>", lambda e: self.cancel_measurement())

    # --------------------------------------------------------- 打开图片
    def open_image(self):
        path = filedialog.askopenfilename(
            title=self._t("open_image_title"),
            filetypes=[
                (self._t("img_files"), "*.jpg *.jpeg *.bmp *.png *.tif *.tiff"),
                (self._t("all_files"), "*.*"),
            ],
        )
        if not path:
            return

        try:
            img = Image.open(path)
            img.load()
        except (OSError, ValueError) as exc:
            messagebox.showerror(self._t("error"), self._t("open_fail", e=exc))
            return

        # 16-bit TIFF → 8-bit
        if img.mode in ("I;16", "I;16B", "I;16L", "I", "F"):
            arr = np.array(img, dtype=np.float64)
            lo, hi = arr.min(), arr.max()
            if hi > lo:
                arr = (arr - lo) / (hi - lo) * 255.0
            img = Image.fromarray(arr.astype(np.uint8))
        if img.mode != "RGB":
            img = img.convert("RGB")

        self.pil_image = img
        self.img_w, self.img_h = img.size
        self.title(f"Spore Viewer - {os.path.basename(path)}")
        logger.info("Opened %s (%dx%d)", path, self.img_w, self.img_h)

        self.session.clear()
        self._refresh_list()
        self.fit_to_window()

    # --------------------------------------------------------- 缩放/平移
    def fit_to_window(self):
        if self.pil_image is None:
            return
        cw = self.canvas.winfo_width() or config.CANVAS_WIDTH
        ch = self.canvas.winfo_height() or config.CANVAS_HEIGHT
        self.view = ViewTransform.fit(self.img_w, self.img_h, cw, ch)
        self._render()

    def _on_scroll(self, event):
        factor = config.ZOOM_STEP if event.delta > 0 else 1 / config.ZOOM_STEP
        self._zoom_at(event.x, event.y, factor)

    def _zoom_at(self, cx, cy, factor):
        if self.pil_image is None:
            return
        new_zoom = self.view.zoom * factor
        if not config.ZOOM_MIN <= new_zoom <= config.ZOOM_MAX:
            return
        self.view = self.view.zoom_at(cx, cy, factor)
        self._render()

    # --------------------------------------------------------- 坐标转换
    def _canvas_to_img(self, cx, cy):
        return self.view.to_image_space(cx, cy)

    def _img_to_canvas(self, ix, iy):
        return self.view.apply(ix, iy)

    # --------------------------------------------------------- 渲染
    def _render(self):
        self.canvas.delete("all")
        if self.pil_image is None:
            return

        cw = self.canvas.winfo_width()
        ch = self.canvas.winfo_height()
        zoom = self.view.zoom

        p0 = self._canvas_to_img(0, 0)
        p1 = self._canvas_to_img(cw, ch)
        ix0c = max(0, int(math.floor(p0.x)))
        iy0c = max(0, int(math.floor(p0.y)))
        ix1c = min(self.img_w, int(math.ceil(p1.x)))
        iy1c = min(self.img_h, int(math.ceil(p1.y)))

        if ix1c > ix0c and iy1c > iy0c:
            crop = self.pil_image.crop((ix0c, iy0c, ix1c, iy1c))
            new_w = max(1, int((ix1c - ix0c) * zoom))
            new_h = max(1, int((iy1c - iy0c) * zoom))
            resample = Image.NEAREST if zoom > 4 else Image.BILINEAR
            self.tk_image = ImageTk.PhotoImage(crop.resize((new_w, new_h), resample))
            px, py = self._img_to_canvas(ix0c, iy0c)
            self.canvas.create_image(px, py, anchor=tk.NW, image=self.tk_image)

        self._draw_overlays()

    def _draw_overlays(self):
        for blob in self.session.blobs:
            for line in (blob.line1, blob.line2):
                cx1, cy1 = self._img_to_canvas(line.x1, line.y1)
                cx2, cy2 = self._img_to_canvas(line.x2, line.y2)
                self.canvas.create_line(cx1, cy1, cx2, cy2, fill=config.BLOB_COLOR, width=2)
                value, unit = self._display_length(line.length)
                mx, my = self._img_to_canvas(line.mid_x, line.mid_y)
                self.canvas.create_text(mx + 6, my + 6, text=f"{value:.2f} {unit}",
                                        anchor=tk.NW, fill=config.LABEL_COLOR,
                                        font=("Arial", 9, "bold"))

        for line in self.session.lines:
            cx1, cy1 = self._img_to_canvas(line.x1, line.y1)
            cx2, cy2 = self._img_to_canvas(line.x2, line.y2)
            self.canvas.create_line(cx1, cy1, cx2, cy2, fill=config.PENDING_LINE_COLOR, width=3)

        r = 5
        for p in self.session.points:
            if self.session.calibration_mode:
                color = config.CALIBRATION_POINT_COLOR
            elif p.index > 1:
                color = config.SHORT_AXIS_POINT_COLOR
            else:
                color = config.LONG_AXIS_POINT_COLOR
            cx, cy = self._img_to_canvas(p.x, p.y)
            self.canvas.create_oval(cx - r, cy - r, cx + r, cy + r, fill=color, outline="")

        self._draw_scale_bar()

    def _draw_scale_bar(self):
        """左下角比例尺，长度取 1/2/5 x 10^n μm 中不超过 150 画布像素的最大值。"""
        cal = self.registry.active
        if cal is None:
            return
        px_per_um_canvas = cal.value * self.view.zoom
        if px_per_um_canvas <= 0:
            return
        max_um = 150 / px_per_um_canvas
        exp = 10 ** math.floor(math.log10(max_um))
        bar_um = max(m * exp for m in (1, 2, 5) if m * exp <= max_um)
        bar_px = bar_um * px_per_um_canvas
        x0 = 20
        y0 = self.canvas.winfo_height() - 20
        color = self.prefs.scale_bar_color
        self.canvas.create_line(x0, y0, x0 + bar_px, y0, fill=color, width=3)
        self.canvas.create_text(x0 + bar_px / 2, y0 - 10, fill=color,
                                text=f"{bar_um:g} µm", font=("Arial", 9, "bold"))

    def _display_length(self, px):
        """像素长度 -> (显示值, 单位)"""
        cal = self.registry.active
        if cal is None:
            return px, "px"
        return convert_length(px / cal.value, "μm", self.display_unit), self.display_unit

    # --------------------------------------------------------- 鼠标事件
    def _on_left_press(self, event):
        self._press_pos = (event.x, event.y)
        self._pan_start = (event.x, event.y, self.view)
        self._dragged = False

    def _on_left_drag(self, event):
        if self._pan_start is None or self.pil_image is None:
            return
        sx, sy, view = self._pan_start
        if (abs(event.x - sx) > config.DRAG_THRESHOLD_PX
                or abs(event.y - sy) > config.DRAG_THRESHOLD_PX):
            self._dragged = True
        if self._dragged:
            zoom = view.zoom
            self.view = view.translate((event.x - sx) / zoom, (event.y - sy) / zoom)
            self._render()

    def _on_left_release(self, event):
        self._pan_start = None
        if self._dragged or self.pil_image is None:
            return
        outcome = self.session.click_device(event.x, event.y)
        if outcome is ClickOutcome.REJECTED:
            self.status_var.set(self._t("click_rejected"))
        elif outcome is ClickOutcome.BLOB_CREATED:
            blob = self.session.blobs[-1]
            a, unit = self._display_length(blob.axis_a)
            b, _ = self._display_length(blob.axis_b)
            self._refresh_list()
            self.status_var.set(self._t("blob_recorded", n=len(self.session.blobs),
                                        a=a, b=b, u=unit))
        self._render()
        if outcome is ClickOutcome.CALIBRATION_REQUESTED:
            self._run_calibration()

    def _on_motion(self, event):
        if self.pil_image is None:
            return
        p = self._canvas_to_img(event.x, event.y)
        self.status_var.set(self._t("status_fmt", mode=self._mode_text(),
                                    zoom=self.view.zoom * 100, x=p.x, y=p.y))
        if self._pan_start is None and self.session.move(p.x, p.y):
            self._render()

    def _on_right_click(self, event):
        if self.pil_image is None:
            return
        removed = self.session.secondary_click_device(event.x, event.y)
        if removed:
            self._refresh_list()
            self.status_var.set(self._t("blobs_removed", n=len(removed)))
        self._render()

    def _update_status_idle(self):
        self.status_var.set(self._t("status_short_fmt", mode=self._mode_text(),
                                    zoom=self.view.zoom * 100))

    # --------------------------------------------------------- 标定
    def set_mode(self, calibration_mode):
        self.session.set_calibration_mode(calibration_mode)
        self._update_status_idle()
        self._render()

    def _run_calibration(self):
        prompt = TkPrompt(self, self._t("scale_mode"))
        try:
            cal = self.session.run_calibration_prompt(prompt, self.lang)
        except StorageFailure as exc:
            messagebox.showerror(self._t("error"), self._t("storage_fail", e=exc))
            cal = None
            self._refresh_calibrations()
        except ValueError as exc:
            logger.warning("Calibration rejected: %s", exc)
            self.session.cancel_calibration()
            messagebox.showerror(self._t("error"), self._t("cal_invalid", e=exc))
            cal = None
        if cal is not None:
            self._refresh_calibrations()
            messagebox.showinfo(self._t("calibration"),
                                self._t("cal_added_fmt", name=cal.name, v=cal.value))
        self._render()

    def _calibration_labels(self):
        labels = [self._t("cal_none")]
        for cal in self.registry:
            labels.append(self._t("cal_option_fmt", name=cal.name, v=cal.value))
        return labels

    def _refresh_calibrations(self):
        labels = self._calibration_labels()
        self.cal_combo.config(values=labels)
        names = [None] + self.registry.names()
        idx = names.index(self.registry.active_name) if self.registry.active_name in names else 0
        self.cal_var.set(labels[idx])

    def _on_calibration_change(self, event=None):
        idx = self.cal_combo.current()
        names = [None] + self.registry.names()
        name = names[idx] if 0 <= idx < len(names) else None
        try:
            self.registry.set_active(name)
        except StorageFailure as exc:
            messagebox.showerror(self._t("error"), self._t("storage_fail", e=exc))
        self._refresh_list()
        self._render()

    def remove_calibration(self):
        name = self.registry.active_name
        if name is None:
            return
        if not messagebox.askyesno(self._t("confirm"), self._t("remove_cal_confirm", name=name)):
            return
        try:
            self.registry.remove(name)
        except StorageFailure as exc:
            messagebox.showerror(self._t("error"), self._t("storage_fail", e=exc))
        self._refresh_calibrations()
        self._refresh_list()
        self._render()

    def import_calibrations(self):
        path = filedialog.askopenfilename(
            title=self._t("import_cal"),
            filetypes=[(self._t("json_files"), "*.json"), (self._t("all_files"), "*.*")],
        )
        if not path:
            return
        try:
            with open(path, "r", encoding="utf-8") as f:
                imported = self.registry.import_json(f.read())
        except (OSError, MalformedImportError) as exc:
            messagebox.showerror(self._t("error"), self._t("import_fail", e=exc))
            return
        except StorageFailure as exc:
            messagebox.showerror(self._t("error"), self._t("storage_fail", e=exc))
            imported = list(self.registry)
        self._refresh_calibrations()
        self._refresh_list()
        self.status_var.set(self._t("cal_imported_fmt", n=len(imported)))

    def export_calibrations(self):
        path = filedialog.asksaveasfilename(
            title=self._t("export_cal"),
            defaultextension=".json",
            initialfile="calibrations.json",
            filetypes=[(self._t("json_files"), "*.json")],
        )
        if not path:
            return
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(self.registry.export_json())
            self.status_var.set(self._t("exported_fmt", p=path))
        except OSError as exc:
            messagebox.showerror(self._t("export_fail"), str(exc))

    # --------------------------------------------------------- 测量管理
    def _on_display_unit_change(self, event=None):
        self.display_unit = self.display_unit_var.get()
        self._refresh_list()
        self._render()

    def choose_color(self, field):
        """通过颜色对话框修改背景或比例尺颜色，并立即保存。"""
        current = getattr(self.prefs, field)
        title = self._t("bg_color" if field == "background_color" else "scale_bar_color")
        _rgb, color = colorchooser.askcolor(color=current, parent=self, title=title)
        if not color or color == current:
            return
        setattr(self.prefs, field, color)
        self.canvas.config(bg=self.prefs.background_color)
        try:
            save_preferences(self.store, self.prefs)
        except StorageFailure as exc:
            messagebox.showerror(self._t("error"), self._t("storage_fail", e=exc))
        self._render()

    def _on_notes_change(self, event=None):
        notes = self.notes_text.get("1.0", tk.END).rstrip("\n")
        if notes == self.prefs.notes:
            return
        self.prefs.notes = notes
        try:
            save_preferences(self.store, self.prefs)
        except StorageFailure as exc:
            messagebox.showerror(self._t("error"), self._t("storage_fail", e=exc))

    def _refresh_list(self):
        cal = self.registry.active
        unit = self.display_unit if cal is not None else "px"
        self.tree.heading("col_id", text=self._t("col_id"))
        self.tree.heading("col_axis_a", text=self._t("col_axis_a", u=unit))
        self.tree.heading("col_axis_b", text=self._t("col_axis_b", u=unit))

        self.tree.delete(*self.tree.get_children())
        for i, blob in enumerate(self.session.blobs, 1):
            a, _ = self._display_length(blob.axis_a)
            b, _ = self._display_length(blob.axis_b)
            self.tree.insert("", tk.END, iid=str(i), values=(i, f"{a:.2f}", f"{b:.2f}"))

        ratio = self.registry.active_ratio()
        stats = compute_statistics(self.session.blobs, ratio)
        if stats.is_empty:
            self.stat_label.config(text=f'{self._t("count")}: 0')
            return

        def _u(v):
            return convert_length(v, "μm", self.display_unit) if cal is not None else v

        lines = [f'{self._t("count")}: {stats.count}']
        for axis, mean, lo, hi, rng, std in (
                ("axis_a", stats.mean_a, stats.min_a, stats.max_a, stats.range_a, stats.stddev_a),
                ("axis_b", stats.mean_b, stats.min_b, stats.max_b, stats.range_b, stats.stddev_b)):
            lines.append(self._t("stat_axis_fmt", axis=self._t(axis), mean=_u(mean),
                                 lo=_u(lo), hi=_u(hi), rng=_u(rng), std=_u(std), u=unit))
        self.stat_label.config(text="\n".join(lines))

    def delete_selected(self):
        sel = self.tree.selection()
        if not sel:
            return
        for idx in sorted((int(s) - 1 for s in sel), reverse=True):
            if 0 <= idx < len(self.session.blobs):
                self.session.remove_blob(idx)
        self._refresh_list()
        self._render()

    def clear_all(self):
        if not self.session.blobs:
            return
        if messagebox.askyesno(self._t("confirm"), self._t("clear_confirm")):
            self.session.clear()
            self._refresh_list()
            self._render()

    def undo(self):
        if self.session.in_progress:
            self.cancel_measurement()
            return
        if self.session.undo_last_blob() is None:
            return
        self._refresh_list()
        self._render()
        self.status_var.set(self._t("undo_meas_fmt", n=len(self.session.blobs) + 1))

    def cancel_measurement(self):
        self.session.reset()
        self._render()
        self.status_var.set(self._t("cancelled"))

    def reset_all(self):
        """清除所有标定和测量 (需要确认)。"""
        if not messagebox.askyesno(self._t("confirm"), self._t("reset_confirm")):
            return
        try:
            self.registry.clear()
        except StorageFailure as exc:
            messagebox.showerror(self._t("error"), self._t("storage_fail", e=exc))
        self.session.clear()
        self.session.set_calibration_mode(False)
        self._refresh_calibrations()
        self._refresh_list()
        self._render()

    # --------------------------------------------------------- 直方图
    def show_histogram(self):
        blobs = self.session.blobs
        if not blobs:
            messagebox.showwarning(self._t("warn"), self._t("no_data"))
            return

        cal = self.registry.active
        unit = self.display_unit if cal is not None else "px"
        series = []
        for axis_key, attr, color in (("axis_a", "axis_a", "#4C72B0"),
                                      ("axis_b", "axis_b", "#DD8452")):
            vals = np.array([self._display_length(getattr(b, attr))[0] for b in blobs])
            series.append((self._t(axis_key), vals, color))

        win = tk.Toplevel(self)
        win.title(self._t("hist_title"))
        win.geometry("700x550")

        fig = Figure(figsize=(7, 5), dpi=100)
        ax = fig.add_subplot(111)
        num_bins = max(5, int(math.sqrt(len(blobs))))
        for label, vals, color in series:
            ax.hist(vals, bins=num_bins, density=True, alpha=0.6,
                    color=color, edgecolor="white", label=label)
            mean, std = np.mean(vals), np.std(vals)
            if std > 0:
                x_fit = np.linspace(vals.min() - std, vals.max() + std, 200)
                ax.plot(x_fit, norm.pdf(x_fit, mean, std), color=color, linewidth=2,
                        label=self._t("hist_legend_fit", axis=label))

        ax.set_xlabel(self._t("hist_xlabel", u=unit), fontsize=12)
        ax.set_ylabel(self._t("hist_ylabel"), fontsize=12)
        ax.set_title(self._t("hist_title_fmt", n=len(blobs)), fontsize=13)
        ax.legend(fontsize=10)
        fig.tight_layout()

        canvas_agg = FigureCanvasTkAgg(fig, master=win)
        canvas_agg.draw()
        canvas_agg.get_tk_widget().pack(fill=tk.BOTH, expand=True)

        nav = NavigationToolbar2Tk(canvas_agg, win)
        nav.update()
        nav.pack(side=tk.BOTTOM, fill=tk.X)

    # --------------------------------------------------------- CSV 导出
    def export_csv(self):
        if not self.session.blobs:
            messagebox.showwarning(self._t("warn"), self._t("no_data"))
            return

        path = filedialog.asksaveasfilename(
            title=self._t("export_csv"),
            defaultextension=".csv",
            filetypes=[(self._t("csv_files"), "*.csv")],
        )
        if not path:
            return

        try:
            with open(path, "w", newline="", encoding="utf-8-sig") as f:
                writer = csv.writer(f)
                write_blob_csv(writer, self.session.blobs, self.registry.active,
                               lang=self.lang, display_unit=self.display_unit)
            self.status_var.set(self._t("exported_fmt", p=path))
        except OSError as exc:
            messagebox.showerror(self._t("export_fail"), str(exc))


# ---------------------------------------------------------------------------
# 入口
# ---------------------------------------------------------------------------

def main():
    config.setup_logging()
    app = SporeViewerApp(JsonFileStore(config.settings_path()))
    app.mainloop()


if __name__ == "__main__":
    main()
