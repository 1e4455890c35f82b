import sys
from pathlib import Path

from loguru import logger

log_dir = Path("logs")
log_file = log_dir / "osrs_icons_{time}.log"

logger.remove()
logger.add(
    sys.stderr,
    level="INFO",
    format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
)
logger.add(
    log_file,
    rotation="256 MB",  # 每個檔案滿 256MB 就切分
    retention="10 days",  # 只保留最近 10 天的日誌 (自動刪除舊的)
    compression="zip",  # 切分後的舊檔案自動壓縮成 zip (節省空間)
    encoding="utf-8",  # 防止中文亂碼
    level="DEBUG",  # 檔案中保留 DEBUG 以上的完整紀錄
    delay=True,  # 第一筆紀錄寫入時才建立檔案
)
