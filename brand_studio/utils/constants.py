"""应用常量定义."""

from pathlib import Path

# ===================
# 应用信息
# ===================
APP_NAME = "Brand Studio 图层合成引擎"
APP_VERSION = "0.3.0"

# ===================
# 路径常量
# ===================
# 应用数据目录
APP_DATA_DIR = Path.home() / ".brand-studio"

# 日志目录
LOG_DIR = APP_DATA_DIR / "logs"

# 品牌套件文件
BRAND_KIT_FILE = APP_DATA_DIR / "brand_kit.json"

# ===================
# 画布设置
# ===================
DEFAULT_CANVAS_WIDTH = 1080
DEFAULT_CANVAS_HEIGHT = 1080
DEFAULT_BACKGROUND_COLOR = "#ffffff"

# ===================
# 图层设置
# ===================
# 复制图层时的位置偏移
DUPLICATE_OFFSET = 20

# 复制图层名称后缀
DUPLICATE_NAME_SUFFIX = " copy"

# 上传图片最大占画布短边比例
UPLOAD_MAX_FRACTION = 0.8

# 品牌素材最大占画布短边比例
ASSET_MAX_FRACTION = 0.3

# 形状图层默认占画布短边比例
SHAPE_SIZE_FRACTION = 0.3

# 文字图层默认宽度
DEFAULT_TEXT_BOX_WIDTH = 200

# ===================
# 选中框
# ===================
SELECTION_COLOR = "#3B82F6"
SELECTION_WIDTH = 2
SELECTION_PADDING = 2
SELECTION_DASH = 5
SELECTION_GAP = 5

# ===================
# 导出与版本
# ===================
EXPORT_FILENAME_STEM = "brand-studio-export"
DEFAULT_EXPORT_QUALITY = 1.0

# 版本缩略图 (JPEG 质量 0-1)
THUMBNAIL_QUALITY = 0.5
THUMBNAIL_SIZE = (320, 320)

# ===================
# AI 生成
# ===================
DEFAULT_API_BASE = "https://api.openai.com/v1"
DEFAULT_IMAGE_MODEL = "gpt-image-1"
API_TIMEOUT = 120  # 秒
API_MAX_RETRIES = 3
API_RETRY_DELAY = 1.0  # 秒

# 提示词历史保留条数
PROMPT_HISTORY_LIMIT = 20

# 迭代时没有历史提示词的回退
FALLBACK_BASE_PROMPT = "an image"

# 去背景提示词
REMOVE_BACKGROUND_PROMPT = (
    "Create a transparent PNG of the main subject extracted from the image, "
    "with clean edges and no background. Focus on the primary object/person."
)
