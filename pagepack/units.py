PT_PER_INCH = 72.0
CM_PER_INCH = 2.54


def cm_to_pt(cm: float) -> float:
    return cm * PT_PER_INCH / CM_PER_INCH


def cm_to_px(cm: float, dpi: int) -> int:
    return int(round(cm / CM_PER_INCH * dpi))
