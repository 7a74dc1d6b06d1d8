"""
Thiết lập logging cho API và CLI từ một tệp YAML (`logging.config.dictConfig`).

Log INFO/DEBUG đi ra stdout, WARNING trở lên đi ra stderr và tệp log. Biến môi
trường `LOG_LEVEL` ghi đè level của root logger.
"""

import logging
import logging.config
import os
from pathlib import Path
from typing import Any, Dict, Union

import yaml


class MaxLevelFilter(logging.Filter):
    """
    Chỉ cho qua các log record có level nhỏ hơn hoặc bằng `level`.

    Được tham chiếu trong `configs/logger.yaml` (qua khoá `()`) để handler
    stdout không in lặp lại các cảnh báo đã có ở stderr.
    """

    def __init__(self, level: Union[str, int], **kwargs):
        super().__init__(**kwargs)
        if isinstance(level, str):
            self.level = logging.getLevelNamesMapping()[level.upper()]
        else:
            self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno <= self.level


def _prepare_log_files(config: Dict[str, Any]) -> None:
    """Tạo thư mục cha cho mọi handler ghi tệp được khai báo trong cấu hình."""
    for handler in (config.get("handlers") or {}).values():
        filename = handler.get("filename")
        if filename:
            Path(filename).parent.mkdir(parents=True, exist_ok=True)


def setup_logging(
    config_path: Union[str, Path] = "configs/logger.yaml",
    default_level: int = logging.INFO,
) -> None:
    """
    Áp dụng cấu hình logging từ tệp YAML.

    Nếu tệp không tồn tại hoặc không hợp lệ, quay về `logging.basicConfig`
    để ứng dụng vẫn ghi được log.

    Args:
        config_path: Đường dẫn đến tệp YAML cấu hình logging.
        default_level: Log level dùng cho cấu hình dự phòng.
    """
    config_path = Path(config_path)
    level_override = os.environ.get("LOG_LEVEL", "").upper()

    if not config_path.is_file():
        logging.basicConfig(level=level_override or default_level)
        logging.warning(f"⚠️ Không tìm thấy '{config_path}', dùng cấu hình logging cơ bản.")
        return

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_dict = yaml.safe_load(f)
        if not isinstance(config_dict, dict):
            raise ValueError("Tệp YAML rỗng hoặc không hợp lệ.")

        if level_override and "root" in config_dict:
            config_dict["root"]["level"] = level_override

        _prepare_log_files(config_dict)
        logging.config.dictConfig(config_dict)
        if level_override:
            logging.getLogger(__name__).info(f"Log level được ghi đè thành '{level_override}' bởi LOG_LEVEL.")

    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        logging.basicConfig(level=default_level)
        logging.exception(f"Lỗi khi cấu hình logging từ '{config_path}': {e}")
