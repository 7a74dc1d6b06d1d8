"""
Module khai báo chính sách cache HTTP cho các endpoint.

Server không lưu kết quả truy vấn trong bộ nhớ: mỗi request luôn đọc lại dữ
liệu hiện tại. Việc cache chỉ được gợi ý cho trình duyệt/CDN thông qua header
`Cache-Control`, được gắn vào response bằng các dependency dưới đây.
"""

from typing import Callable

from fastapi import Response


PRIVATE_SHORT = "private, max-age=30"
PRIVATE_BRIEF = "private, max-age=15"
PUBLIC_LONG = "public, max-age=300, s-maxage=300, stale-while-revalidate=60"


def cache_control(policy: str) -> Callable[[Response], None]:
    """
    Tạo dependency gắn header `Cache-Control` với giá trị `policy`.

    Header chỉ có hiệu lực khi endpoint trả về thành công; các response lỗi
    được tạo bởi exception handler và không mang header này.
    """

    def _set_header(response: Response) -> None:
        response.headers["Cache-Control"] = policy

    return _set_header


private_short_cache = cache_control(PRIVATE_SHORT)
private_brief_cache = cache_control(PRIVATE_BRIEF)
public_long_cache = cache_control(PUBLIC_LONG)
