from .catalog import ScanDirection, ToolCatalog, default_catalog
from .schemas import FILE_EDIT_TOOLS, TOOL_SCHEMAS
__all__ = ["ScanDirection", "ToolCatalog", "default_catalog",
           "FILE_EDIT_TOOLS", "TOOL_SCHEMAS"]
