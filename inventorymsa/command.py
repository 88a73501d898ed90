"""Command line script for InventoryMSA."""
import json
import os
import sys
from argparse import ArgumentParser, Namespace, RawTextHelpFormatter
from pathlib import Path
from textwrap import dedent
from typing import Optional, Sequence

import httpx
import uvicorn

from inventorymsa.config import WORKER_NAMES, InventoryMSA, load_config
from inventorymsa.core import AppError, get_logger
from inventorymsa.utils import Fore, Style, bold, fg

YELLOW, CYAN, RED, GREEN, WHITE = (
    Fore.YELLOW,
    Fore.CYAN,
    Fore.RED,
    Fore.GREEN,
    Fore.WHITE,
)
WHITE_EX, CYAN_EX = Fore.LIGHTWHITE_EX, Fore.LIGHTCYAN_EX
BRIGHT, RESET_ALL = Style.BRIGHT, Style.RESET_ALL

logger = get_logger("inventorymsa.command")


class InventoryMSACommand:
    def __init__(self, msa: Optional[InventoryMSA] = None, path: Optional[Path] = None):
        """Constructor.

        현재 경로의 `setup.cfg` 의 `[inventorymsa]` 섹션과 `INVENTORY_*` 환경변수로
        설정을 로드합니다.
        """
        self.path = path or Path(os.path.abspath("."))
        self.msa = msa or InventoryMSA(load_config(self.path))

    def banner(self, msg, icon=""):
        """프로젝트 배너를 표시합니다."""
        if os.name == "nt":
            icon = ""
        try:
            term_width = os.get_terminal_size().columns
        except OSError:
            term_width = 75
        banner_width = min(75, term_width)
        print("─" * banner_width)
        print(f"{icon} {msg}")
        print("─" * banner_width)

    def info(self):
        """InventoryMSA 설정 정보를 출력합니다."""
        dot = bold("-", YELLOW)
        config = self.msa.config
        self.banner(f"{bold('InventoryMSA Information')}", icon="💡")
        print(dot, fg("Name", CYAN), "    :", fg(config.name, WHITE_EX))
        print(dot, fg("Title", CYAN), "   :", fg(config.title, WHITE_EX))
        print(dot, fg("Database", CYAN), ":", fg(config.db_url, WHITE_EX))
        print(dot, fg("Redis", CYAN), "   :", fg(f"{config.redis_host}:{config.redis_port}", WHITE_EX))
        print(dot, fg("API", CYAN), "     :", fg(config.get_api_url(), WHITE_EX))
        print(dot, fg("Log", CYAN), "     :", fg(config.log_level, WHITE_EX))
        print(dot, fg("Path", CYAN), "    :", fg(self.path, WHITE_EX))

    def init_db(self, drop_all=False):
        """데이터베이스 테이블을 생성합니다.

        --drop-all 옵션을 주면 기존 테이블을 지우고 다시 만듭니다.
        """
        self.msa.init_db(drop_all=drop_all)
        bullet = bold("✓" if os.name != "nt" else "v", GREEN)
        logger.info(f"{bullet} init {fg('database', CYAN)}... %s", bold(self.msa.config.db_url, YELLOW))

    def api(self, dry_run=False, banner=True):
        """관리자 API 서버를 실행합니다."""
        from inventorymsa.api import init_app

        if banner:
            msg = "".join([bold("Launching InventoryMSA API: ", CYAN), bold(self.msa.config.title, WHITE)])
            self.banner(msg, icon="🚀")

        app = init_app(self.msa)
        if not dry_run:
            uvicorn.run(app, host=self.msa.config.api_host, port=self.msa.config.api_port)

    def worker(self, name: str, max_batches: Optional[int] = None):
        """큐 워커를 실행합니다.

        name: allocate | complete | deallocate | restock
        """
        if name not in WORKER_NAMES:
            raise AppError(f"unknown worker: {name}", transient=False)
        self.msa.init_db()
        self.msa.worker(name).run_forever(max_batches=max_batches)

    def send_event(self, name: str, event_json: str) -> str:
        """이벤트 JSON 을 CDC 레코드로 감싸서 워커 큐에 넣습니다."""
        if name not in WORKER_NAMES:
            raise AppError(f"unknown worker: {name}", transient=False)
        try:
            event = json.loads(event_json)
        except ValueError as e:
            raise AppError(f"invalid event JSON: {e}", transient=False) from e
        queue = self.msa.config.queue_name(name)
        message_id = self.msa.queue_client.send_event(queue, event)
        print(fg(message_id, WHITE_EX))
        return message_id

    def restock(self, sku: str, units: int, lot_id: str):
        """실행 중인 API 서버에 입고 요청을 보냅니다."""
        from inventorymsa.api import APIClient

        with httpx.Client(base_url=self.msa.config.get_api_url()) as session:
            r = APIClient(session).restock_sku(sku, units, lot_id)
        print(r.status_code, r.text)


class InventoryMSACommandParser:
    """콘솔 커맨드 명령어 파서.

    실제 작업은 `InventoryMSACommand` 객체에 위임합니다.
    """

    def __init__(self, cmd: Optional[InventoryMSACommand] = None):
        """기본 생성자."""
        self.parser = ArgumentParser(
            "inventorymsa",
            description=f"✨ {bold('InventoryMSA')} : {fg('command line utility', CYAN_EX)}",
        )
        self._subparsers = self.parser.add_subparsers(dest="command")
        self._cmd = cmd or InventoryMSACommand()

        # init subparsers
        for handler in [
            self._cmd.info,
            self._cmd.init_db,
            self._cmd.api,
            self._cmd.worker,
            self._cmd.send_event,
            self._cmd.restock,
        ]:
            command = handler.__name__.replace("_", "-")
            # 핸들러 함수의 주석을 커맨드라인 도움말로 변환하기 위한 작업입니다.
            doc = None
            if handler.__doc__:
                lines = handler.__doc__.splitlines()
                doc = lines[0] + "\n" + dedent("\n".join(lines[1:]))
            parser = self._subparsers.add_parser(
                command,
                description=doc,
                formatter_class=RawTextHelpFormatter,
            )
            if command == "init-db":
                parser.add_argument("--drop-all", action="store_true", help="기존 테이블 삭제 후 생성")
            if command == "api":
                parser.add_argument("--dry-run", action="store_true", help="서버는 띄우지 않음")
            if command in ("worker", "send-event"):
                parser.add_argument("name", choices=WORKER_NAMES)
            if command == "worker":
                parser.add_argument("--max-batches", type=int, default=None)
            if command == "send-event":
                parser.add_argument("event_json", help="camelCase 이벤트 JSON 문자열")
            if command == "restock":
                parser.add_argument("sku")
                parser.add_argument("units", type=int)
                parser.add_argument("lot_id")

    def parse_args(self, args: Sequence[str]):
        """콘솔 명령어를 해석해서 적절한 작업을 수행합니다."""
        if not args:
            self.parser.print_help()
            return

        ns = self.parser.parse_args(args)
        handler_name = ns.command.replace("-", "_")
        try:
            if hasattr(self, handler_name):
                # 커맨드 명령어와 동일한 이름의 메소드가 파서 클래스에 있으면
                # 그 메소드를 호출해서 적당한 처리 후 실제 메소드를 호출합니다.
                getattr(self, handler_name)(ns)
            else:
                # 아닐 경우 InventoryMSACommand 클래스에서 핸를러를 호출합니다.
                getattr(self._cmd, handler_name)()
        except AppError as e:
            print(
                f"{bold('InventoryMSA ERROR:', RED)} {fg(e.message, YELLOW)}",
                file=sys.stderr,
            )

    def init_db(self, ns: Namespace):
        """`init-db` 명령어 처리."""
        self._cmd.init_db(drop_all=ns.drop_all)

    def api(self, ns: Namespace):
        """`api` 명령어 처리."""
        self._cmd.api(dry_run=ns.dry_run)

    def worker(self, ns: Namespace):
        """`worker` 명령어 처리."""
        self._cmd.worker(ns.name, max_batches=ns.max_batches)

    def send_event(self, ns: Namespace):
        """`send-event` 명령어 처리."""
        self._cmd.send_event(ns.name, ns.event_json)

    def restock(self, ns: Namespace):
        """`restock` 명령어 처리."""
        self._cmd.restock(ns.sku, ns.units, ns.lot_id)


def console_main():
    parser = InventoryMSACommandParser()
    parser.parse_args(sys.argv[1:])


if __name__ == "__main__":
    console_main()
