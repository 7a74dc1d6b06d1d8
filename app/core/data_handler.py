import logging

import pandas as pd
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select


logger = logging.getLogger(__name__)


def query_dataframe(db: Session, statement: Select, columns: list = None) -> pd.DataFrame:
    """Thực thi một câu lệnh SELECT của SQLAlchemy và trả về kết quả dạng DataFrame.

    Dùng chung kết nối của session hiện tại để đọc được cả dữ liệu vừa ghi
    trong cùng transaction. DataFrame rỗng vẫn giữ đủ tên cột để các bước
    group/merge phía sau không phải xử lý trường hợp đặc biệt.

    Raises:
        SQLAlchemyError: Lỗi database được ghi log rồi ném lại để API trả về 500.
    """
    try:
        rows = db.execute(statement).mappings().all()
    except SQLAlchemyError as e:
        logger.error(f'Lỗi khi thực thi query: {e}\nQuery: {statement}')
        raise
    columns = columns or list(statement.selected_columns.keys())
    return pd.DataFrame([dict(row) for row in rows], columns=columns)
