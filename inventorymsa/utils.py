from datetime import datetime, timezone

from colorama import init as init_colors

init_colors()  # For Windows environment

from colorama import Fore, Style


def fg(text, color=Fore.WHITE):
    """텍스트를 지정된 ANSI 컬러로 출력합니다."""
    return f"{color}{text}{Fore.RESET}"


def bold(text, color=Fore.WHITE):
    """텍스트를 지정된 ANSI 컬러와 밝기 효과를 주어 출력합니다."""
    return f"{Style.BRIGHT}{color}{text}{Style.RESET_ALL}"


def utcnow_iso() -> str:
    """현재 UTC 시각을 ``2021-09-01T12:34:56.789Z`` 형식의 문자열로 리턴합니다."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_iso(value: str) -> datetime:
    """ISO-8601 문자열을 timezone 정보가 있는 ``datetime`` 으로 변환합니다."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def later_of(candidate: str, previous: str) -> str:
    """두 타임스탬프 중 늦은 쪽을 리턴합니다.

    ``updatedAt`` 이 시계 오차로 뒤로 가는 것을 막는 데 사용합니다.
    """
    if parse_iso(candidate) < parse_iso(previous):
        return previous
    return candidate
