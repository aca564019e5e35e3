# athletics_flow/constants.py

# Input document
DEFAULT_DATA_PATH = "data/jmu.json"
DEFAULT_DATASET = "jmu-athletics"   # key of the athletics table inside the document

# Record schema
NAME_FIELD = "name"
TOTAL_FIELD = "Total"

# First N records are revenue, the rest are expense
REVENUE_ROW_COUNT = 11

# The single node every revenue flows into and every expense flows out of
AGGREGATOR_NAME = "jmu-athletics"
AGGREGATOR_TITLE = "JMU Athletics"

# Upload hardening
MAX_UPLOAD_MB = 10
ALLOWED_EXTS = {".json", ".csv", ".xlsx", ".xls", ".xlsm"}
ALLOWED_MIME = {
    "application/json",
    "text/csv",
    "application/vnd.ms-excel",  # .xls
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",  # .xlsx
    "application/vnd.ms-excel.sheet.macroEnabled.12",  # .xlsm
    # Some browsers use this for anything; still require an allowed extension:
    "application/octet-stream",
}

# Chart defaults
CHART_WIDTH = 928
CHART_HEIGHT = 600
NODE_WIDTH = 15
NODE_PADDING = 10
VALUE_FORMAT = ",.0f"
LINK_COLOR = "source-target"   # source, target, source-target, or a color string
LINK_COLOR_CHOICES = ["source-target", "source", "target", "#aaaaaa"]
