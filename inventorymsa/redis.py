"""Redis 리스트를 메세지 큐로 사용하는 워커 런타임.

받은 메세지는 ``LMOVE`` 로 ``<queue>:processing`` 목록에 옮겨 두었다가 처리가 끝나면
지웁니다. 워커가 처리 도중 죽어도 메세지는 처리중 목록에 남아 있고, 다음 워커가
시작할 때 :meth:`RedisQueueClient.recover` 로 큐에 되돌립니다. 큐 하나에 워커 하나가
붙는 것을 전제로 합니다.
"""
from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping, Optional, Sequence

from redis import Redis
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from inventorymsa.cdc import build_record_body
from inventorymsa.controller import BatchDispatchController, BatchResponse, QueueMessage
from inventorymsa.core import AbstractQueueClient, get_logger

logger = get_logger("inventorymsa.redis")


def processing_queue(queue: str) -> str:
    return f"{queue}:processing"


def dead_letter_queue(queue: str) -> str:
    return f"{queue}:dead"


@dataclass
class RedisConnectInfo:
    host: str
    port: int

    @property
    def conn_args(self):
        return {"host": self.host, "port": self.port}


class RedisQueueClient(AbstractQueueClient):
    """메세지는 ``{"messageId": ..., "body": ..., "attempts": ...}`` JSON 으로 리스트에 저장됩니다.

    생산자는 ``LPUSH`` 로 넣고 소비자는 오른쪽에서 꺼내므로 먼저 들어온 메세지가 먼저
    처리됩니다. Redis 6.2 이상이 필요합니다(``LMOVE``).
    """

    def __init__(self, info: RedisConnectInfo):
        self.redis = Redis(**info.conn_args, decode_responses=True)
        self.info = info

    def send_message(self, queue: str, body: str) -> str:
        message_id = str(uuid.uuid4())
        self.redis.lpush(queue, encode(QueueMessage(message_id=message_id, body=body)))
        logger.debug("sent message %s to %s", message_id, queue)
        return message_id

    def send_event(self, queue: str, event: Mapping[str, Any]) -> str:
        """이벤트(camelCase dict)를 CDC 레코드 형태로 감싸서 보냅니다."""
        return self.send_message(queue, build_record_body(event))

    def receive_messages(self, queue: str, max_messages: int, timeout: int = 1) -> list[QueueMessage]:
        processing = processing_queue(queue)
        first = self.redis.blmove(queue, processing, timeout, src="RIGHT", dest="LEFT")
        if first is None:
            return []

        raws = [first]
        while len(raws) < max_messages:
            raw = self.redis.lmove(queue, processing, src="RIGHT", dest="LEFT")
            if raw is None:
                break
            raws.append(raw)

        return [decode(raw) for raw in raws]

    def ack(self, queue: str, messages: Sequence[QueueMessage]) -> None:
        if not messages:
            return
        with self.redis.pipeline() as pipe:
            for message in messages:
                pipe.lrem(processing_queue(queue), 1, _raw(message))
            pipe.execute()

    def requeue(self, queue: str, messages: Sequence[QueueMessage]) -> None:
        """실패 횟수를 올려서 큐에 다시 넣습니다. 처리중 목록에서 빼는 것과 한 트랜잭션입니다."""
        self._move(queue, queue, messages)

    def dead_letter(self, queue: str, messages: Sequence[QueueMessage]) -> None:
        self._move(queue, dead_letter_queue(queue), messages)

    def _move(self, queue: str, target: str, messages: Sequence[QueueMessage]) -> None:
        if not messages:
            return
        with self.redis.pipeline() as pipe:
            for message in messages:
                pipe.lpush(target, encode(replace(message, attempts=message.attempts + 1)))
                pipe.lrem(processing_queue(queue), 1, _raw(message))
            pipe.execute()

    def recover(self, queue: str) -> int:
        """처리중 목록에 남은 메세지를 큐의 꺼내는 쪽으로 되돌리고 개수를 리턴합니다."""
        count = 0
        while self.redis.lmove(processing_queue(queue), queue, src="LEFT", dest="RIGHT") is not None:
            count += 1
        if count:
            logger.warning("recovered %d in-flight message(s) to %s", count, queue)
        return count


def encode(message: QueueMessage) -> str:
    return json.dumps(
        {"messageId": message.message_id, "body": message.body, "attempts": message.attempts}
    )


def decode(raw: str) -> QueueMessage:
    try:
        data = json.loads(raw)
        return QueueMessage(
            message_id=data["messageId"],
            body=data["body"],
            attempts=int(data.get("attempts", 0)),
            raw=raw,
        )
    except (ValueError, KeyError, TypeError, AttributeError):
        # 형식이 다른 메세지도 컨트롤러에서 InvalidArguments 로 걸러지도록 그대로 넘깁니다.
        return QueueMessage(message_id=str(uuid.uuid4()), body=raw, raw=raw)


def _raw(message: QueueMessage) -> str:
    return message.raw if message.raw is not None else encode(message)


class RedisQueueWorker:
    """큐에서 메세지 배치를 받아 컨트롤러로 넘기고, 결과에 따라 메세지를 정리합니다.

    * 성공했거나 버려진(일시적이지 않은 에러) 메세지는 ack 합니다.
    * 일시적 에러로 실패한 메세지는 ``wait`` 만큼 기다린 뒤 다시 큐에 넣습니다.
    * ``max_deliveries`` 번 실패한 메세지는 ``<queue>:dead`` 로 옮깁니다.
    """

    def __init__(
        self,
        client: AbstractQueueClient,
        queue: str,
        controller: BatchDispatchController,
        batch_size: int = 10,
        timeout: int = 1,
        max_attempts: int = 3,
        max_deliveries: int = 5,
        wait: Optional[wait_base] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.client = client
        self.queue = queue
        self.controller = controller
        self.batch_size = batch_size
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.max_deliveries = max_deliveries
        self.wait = wait or wait_exponential(max=10)
        self.sleep = sleep

    def receive(self) -> list[QueueMessage]:
        retrying = Retrying(
            retry=retry_if_exception_type((RedisConnectionError, RedisTimeoutError)),
            stop=stop_after_attempt(self.max_attempts),
            wait=self.wait,
            sleep=self.sleep,
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                return self.client.receive_messages(self.queue, self.batch_size, self.timeout)
        return []

    def backoff(self, messages: Sequence[QueueMessage]) -> None:
        """재전송 전에 가장 많이 실패한 메세지 기준으로 ``wait`` 만큼 기다립니다."""
        state = RetryCallState(retry_object=Retrying(), fn=None, args=(), kwargs={})
        state.attempt_number = max(m.attempts for m in messages) + 1
        delay = self.wait(state)
        if delay > 0:
            self.sleep(delay)

    def run_once(self) -> BatchResponse:
        messages = self.receive()
        if not messages:
            return BatchResponse()

        response = self.controller.dispatch(messages)
        failed = set(response.batch_item_failures)
        retry = [m for m in messages if m.message_id in failed and m.attempts + 1 < self.max_deliveries]
        dead = [m for m in messages if m.message_id in failed and m.attempts + 1 >= self.max_deliveries]
        done = [m for m in messages if m.message_id not in failed]

        if dead:
            for message in dead:
                logger.error(
                    "message %s failed %d time(s), moved to dead letter queue",
                    message.message_id,
                    message.attempts + 1,
                )
            self.client.dead_letter(self.queue, dead)
        if retry:
            self.backoff(retry)
            logger.info("requeue %d message(s) to %s", len(retry), self.queue)
            self.client.requeue(self.queue, retry)
        self.client.ack(self.queue, done)
        return response

    def run_forever(self, max_batches: Optional[int] = None) -> None:
        logger.info("worker %s listening on %s", self.controller.name, self.queue)
        self.client.recover(self.queue)
        count = 0
        while max_batches is None or count < max_batches:
            self.run_once()
            count += 1
