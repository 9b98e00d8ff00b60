"""
国际化字符串 (zh / en)
"""

STRINGS = {
    # ---- 工具栏 ----
    "open_image":       {"zh": "打开图片",   "en": "Open Image"},
    "spore_mode":       {"zh": "测量模式",   "en": "Spore Mode"},
    "scale_mode":       {"zh": "标定模式",   "en": "Scale Mode"},
    "distribution":     {"zh": "轴长分布",   "en": "Distribution"},
    "export_csv":       {"zh": "导出 CSV",   "en": "Export CSV"},
    "fit_window":       {"zh": "适应窗口",   "en": "Fit Window"},
    "reset":            {"zh": "重置",       "en": "Reset"},
    "import_cal":       {"zh": "导入标定",   "en": "Import Calibrations"},
    "export_cal":       {"zh": "导出标定",   "en": "Export Calibrations"},
    "remove_cal":       {"zh": "删除标定",   "en": "Remove Calibration"},

    # ---- 右侧面板 ----
    "calibration":      {"zh": "标定",       "en": "Calibration"},
    "cal_none":         {"zh": "(像素)",     "en": "(pixels)"},
    "cal_option_fmt":   {"zh": "{name} ({v}px/µm)", "en": "{name} ({v}px/µm)"},
    "blob_list":        {"zh": "测量列表",   "en": "Blobs"},
    "col_id":           {"zh": "#",          "en": "#"},
    "col_axis_a":       {"zh": "长轴 ({u})", "en": "Axis A ({u})"},
    "col_axis_b":       {"zh": "短轴 ({u})", "en": "Axis B ({u})"},
    "delete_sel":       {"zh": "删除选中",   "en": "Delete"},
    "clear_all":        {"zh": "清空全部",   "en": "Clear All"},
    "statistics":       {"zh": "统计信息",   "en": "Statistics"},
    "display_unit":     {"zh": "显示单位",   "en": "Display Unit"},
    "notes":            {"zh": "备注",       "en": "Notes"},
    "settings":         {"zh": "设置",       "en": "Settings"},
    "bg_color":         {"zh": "背景颜色...", "en": "Background Color..."},
    "scale_bar_color":  {"zh": "比例尺颜色...", "en": "Scale Bar Color..."},
    "count":            {"zh": "计数",       "en": "Count"},
    "stat_axis_fmt":    {"zh": "{axis}: 均值 {mean:.2f}  范围 {lo:.2f}-{hi:.2f} ({rng:.2f})  标准差 {std:.2f} {u}",
                         "en": "{axis}: mean {mean:.2f}  range {lo:.2f}-{hi:.2f} ({rng:.2f})  std {std:.2f} {u}"},
    "axis_a":           {"zh": "长轴",       "en": "Axis A"},
    "axis_b":           {"zh": "短轴",       "en": "Axis B"},

    # ---- 状态栏 ----
    "ready":            {"zh": "就绪",       "en": "Ready"},
    "status_fmt":       {"zh": "模式: {mode}  |  缩放: {zoom:.0f}%  |  坐标: ({x:.1f}, {y:.1f})",
                         "en": "Mode: {mode}  |  Zoom: {zoom:.0f}%  |  Pos: ({x:.1f}, {y:.1f})"},
    "status_short_fmt": {"zh": "模式: {mode}  |  缩放: {zoom:.0f}%",
                         "en": "Mode: {mode}  |  Zoom: {zoom:.0f}%"},
    "blob_recorded":    {"zh": "已记录 #{n}: {a:.2f} × {b:.2f} {u}",
                         "en": "Recorded #{n}: {a:.2f} × {b:.2f} {u}"},
    "click_rejected":   {"zh": "该点无效，请重新点击", "en": "Point rejected, click again"},
    "blobs_removed":    {"zh": "已删除 {n} 个测量", "en": "Removed {n} blob(s)"},
    "undo_meas_fmt":    {"zh": "已撤销测量 #{n}", "en": "Undid blob #{n}"},
    "cancelled":        {"zh": "已取消",     "en": "Cancelled"},

    # ---- 标定 ----
    "cal_ask_length":   {"zh": "参考线段长度 {px:.1f} px\n请输入实际长度 (单位 µm):",
                         "en": "Reference segment: {px:.1f} px\nEnter the true measurement (µm):"},
    "cal_ask_name":     {"zh": "请输入标定名称:", "en": "Enter the name for this calibration:"},
    "cal_overwrite":    {"zh": "标定 \"{name}\" 已存在，是否覆盖?",
                         "en": "Calibration \"{name}\" already exists. Overwrite it?"},
    "cal_added_fmt":    {"zh": "已添加标定 {name}: {v}px/µm", "en": "{name} calibration added: {v}px/µm"},
    "cal_imported_fmt": {"zh": "已导入 {n} 个标定", "en": "Imported {n} calibration(s)"},
    "cal_invalid":      {"zh": "标定无效:\n{e}", "en": "Invalid calibration:\n{e}"},

    # ---- 对话框/提示 ----
    "warn":             {"zh": "提示",       "en": "Notice"},
    "error":            {"zh": "错误",       "en": "Error"},
    "confirm":          {"zh": "确认",       "en": "Confirm"},
    "open_image_title": {"zh": "打开图片",   "en": "Open Image"},
    "img_files":        {"zh": "图片文件",   "en": "Image files"},
    "all_files":        {"zh": "所有文件",   "en": "All files"},
    "json_files":       {"zh": "JSON 文件",  "en": "JSON files"},
    "csv_files":        {"zh": "CSV 文件",   "en": "CSV files"},
    "open_fail":        {"zh": "无法打开图片:\n{e}", "en": "Cannot open image:\n{e}"},
    "no_data":          {"zh": "没有测量数据。", "en": "No measurement data."},
    "clear_confirm":    {"zh": "确定要清空所有测量吗?", "en": "Clear all blobs?"},
    "reset_confirm":    {"zh": "确定要清除所有标定和测量吗? 此操作无法撤销。",
                         "en": "Are you sure you want to clear all calibrations and drawing elements? "
                               "This action cannot be undone."},
    "remove_cal_confirm": {"zh": "确定删除标定 \"{name}\" 吗?", "en": "Remove calibration \"{name}\"?"},
    "import_fail":      {"zh": "导入失败:\n{e}", "en": "Import failed:\n{e}"},
    "storage_fail":     {"zh": "保存设置失败:\n{e}", "en": "Could not save settings:\n{e}"},
    "exported_fmt":     {"zh": "已导出: {p}", "en": "Exported: {p}"},
    "export_fail":      {"zh": "导出失败",   "en": "Export failed"},

    # ---- 直方图 ----
    "hist_title":       {"zh": "轴长分布直方图", "en": "Axis Length Distribution"},
    "hist_xlabel":      {"zh": "长度 ({u})", "en": "Length ({u})"},
    "hist_ylabel":      {"zh": "频率密度",   "en": "Frequency Density"},
    "hist_legend_fit":  {"zh": "{axis} 高斯拟合", "en": "{axis} Gaussian Fit"},
    "hist_title_fmt":   {"zh": "轴长分布  (n={n})", "en": "Axis Length Distribution  (n={n})"},

    # ---- CSV 表头 ----
    "csv_axis_a":       {"zh": "长轴 ({u})", "en": "Axis A ({u})"},
    "csv_axis_b":       {"zh": "短轴 ({u})", "en": "Axis B ({u})"},
    "csv_axis_a_px":    {"zh": "长轴像素 (px)", "en": "Axis A (px)"},
    "csv_axis_b_px":    {"zh": "短轴像素 (px)", "en": "Axis B (px)"},
    "csv_aspect":       {"zh": "长短轴比", "en": "Aspect Ratio"},
    "csv_source":       {"zh": "来源", "en": "Source"},
    "csv_manual":       {"zh": "手动", "en": "manual"},
    "csv_detected":     {"zh": "自动", "en": "detected"},
    "csv_stat":         {"zh": "统计",       "en": "Statistics"},
    "csv_count":        {"zh": "计数",       "en": "Count"},
    "csv_mean":         {"zh": "均值",       "en": "Mean"},
    "csv_std":          {"zh": "标准差",     "en": "Std Dev"},
    "csv_min":          {"zh": "最小值",     "en": "Min"},
    "csv_max":          {"zh": "最大值",     "en": "Max"},
    "csv_range":        {"zh": "范围",       "en": "Range"},
    "csv_calibration":  {"zh": "标定 (px/µm)", "en": "Calibration (px/µm)"},
    "csv_gauss_title":  {"zh": "高斯拟合: {axis}", "en": "Gaussian Fit: {axis}"},
    "csv_gauss_mu":     {"zh": "μ (均值)",     "en": "μ (Mean)"},
    "csv_gauss_sigma":  {"zh": "σ (标准差)",   "en": "σ (Std Dev)"},
    "csv_gauss_x":      {"zh": "X ({u})",      "en": "X ({u})"},
    "csv_gauss_y":      {"zh": "Y (概率密度)", "en": "Y (Density)"},
}


def translate(key, lang="zh", **kwargs):
    """查找指定语言的字符串，支持 .format() 参数。"""
    entry = STRINGS.get(key)
    if entry is None:
        return key
    raw = entry.get(lang, entry.get("zh", key))
    if kwargs:
        return raw.format(**kwargs)
    return raw
