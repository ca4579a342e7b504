"""应用常量定义."""

from pathlib import Path

# ===================
# 应用信息
# ===================
APP_NAME = "gallery-watermark"
APP_VERSION = "1.0.0"

# ===================
# 路径常量
# ===================
# 应用数据目录
APP_DATA_DIR = Path.home() / ".gallery-watermark"

# 日志目录
LOG_DIR = APP_DATA_DIR / "logs"

# 包内资源目录
ASSETS_DIR = Path(__file__).resolve().parent.parent / "assets"

# 水印字体
DEFAULT_FONT_PATH = ASSETS_DIR / "fonts" / "Lato-Regular.ttf"
WATERMARK_FONT_FAMILY = "WatermarkFont"

# ===================
# 水印平铺设置
# ===================
# 图片宽度 / 除数 = 平铺单元尺寸
DEFAULT_TILE_DIVISOR = 4

# 平铺单元尺寸 / 比例 = 字号
DEFAULT_FONT_SIZE_RATIO = 3.0

# 旋转角度（度，负数为逆时针）
DEFAULT_ROTATION_ANGLE = -30.0

# 平铺单元最小尺寸（像素）
MIN_TILE_SIZE = 1

# 单张图片最大平铺数量
MAX_TILE_COUNT = 10000

# ===================
# 水印文字样式
# ===================
DEFAULT_LABEL_TEXT = "GALLERY"
DEFAULT_FILL_COLOR = "white"
DEFAULT_FILL_OPACITY = 0.6
DEFAULT_STROKE_COLOR = "black"
DEFAULT_STROKE_WIDTH = 2.0
DEFAULT_STROKE_OPACITY = 0.45
DEFAULT_FONT_WEIGHT = 900

# ===================
# 输入输出设置
# ===================
# 支持的输入格式（Pillow 格式名）
SUPPORTED_IMAGE_FORMATS = {"JPEG", "PNG", "WEBP"}

# 支持的上传 MIME 类型
SUPPORTED_MIME_TYPES = {"image/jpeg", "image/png", "image/webp"}

# 最大上传大小 (5MB)
MAX_UPLOAD_SIZE = 5 * 1024 * 1024

# 输出格式固定为有损 JPEG
OUTPUT_FORMAT = "JPEG"

# 输出质量固定在 90-95 之间，默认 95
DEFAULT_OUTPUT_QUALITY = 95
MIN_OUTPUT_QUALITY = 90
MAX_OUTPUT_QUALITY = 95

# 输出文件名后缀
OUTPUT_SUFFIX = "_watermarked.jpg"

# 导出叠加层的文件名后缀
OVERLAY_SUFFIX = "_overlay.svg"

# ===================
# 远程服务设置
# ===================
DEFAULT_IMAGE_HOST_URL = "https://api.imgbb.com/1/upload"
HTTP_TIMEOUT = 60  # 秒
UPLOAD_MAX_RETRIES = 3
UPLOAD_RETRY_DELAY = 1  # 秒

# 工作线程数量
DEFAULT_WORKER_THREADS = 4
