"""Kafka transport adapters for publishing and consuming push-task events.

Mental model refresher:
- This module is transport glue to Kafka itself.
- It maps Kafka records into the consumer-handler flow and owns offsets.
- A record that cannot be processed goes to the dead-letter topic; its offset
  is committed only once the dead-letter write succeeded.
"""

from __future__ import annotations

from datetime import UTC, datetime
import json
import os
from typing import Any, Mapping

from .config import XiaomiChannelConfig, env_bool, required_env
from .consumer_handler import handle_message
from .xiaomi_client import XiaomiChannelClient

DEFAULT_TOPIC = "push.tasks"


def publish_push_tasks_event(
    payload: Mapping[str, Any],
    *,
    topic: str | None = None,
) -> dict[str, Any]:
    """Publish one push-task event to Kafka."""
    _KafkaConsumer, KafkaProducer, _TopicPartition, _OffsetAndMetadata = _import_kafka_python()
    topic_name = topic or os.getenv("KAFKA_TOPIC_PUSH_TASKS", DEFAULT_TOPIC)
    send_timeout_seconds = float(os.getenv("KAFKA_SEND_TIMEOUT_SECONDS", "10"))

    producer = _json_producer(KafkaProducer)
    try:
        metadata = producer.send(topic_name, value=dict(payload)).get(timeout=send_timeout_seconds)
        producer.flush(timeout=send_timeout_seconds)
    finally:
        producer.close()

    return {
        "topic": metadata.topic,
        "partition": metadata.partition,
        "offset": metadata.offset,
    }


def run_push_worker_forever(client: XiaomiChannelClient | None = None) -> int:
    """Run the Kafka consumer loop that relays push tasks to Xiaomi."""
    KafkaConsumer, KafkaProducer, TopicPartition, OffsetAndMetadata = _import_kafka_python()
    topic_name = os.getenv("KAFKA_TOPIC_PUSH_TASKS", DEFAULT_TOPIC)
    dlq_enabled = env_bool("KAFKA_DLQ_ENABLED", default=True)
    dlq_topic = os.getenv("KAFKA_TOPIC_PUSH_TASKS_DLQ", f"{topic_name}.dlq")
    group_id = os.getenv("KAFKA_GROUP_ID", "push-channel-worker")
    max_records = int(os.getenv("KAFKA_MAX_RECORDS_PER_POLL", "50"))
    poll_timeout_ms = _poll_timeout_ms_from_env()
    dlq_timeout_seconds = float(
        os.getenv("KAFKA_DLQ_SEND_TIMEOUT_SECONDS", os.getenv("KAFKA_SEND_TIMEOUT_SECONDS", "10"))
    )

    if client is None:
        client = XiaomiChannelClient()
    if not client.initialized:
        client.init_channel_client(XiaomiChannelConfig.from_env())

    consumer = KafkaConsumer(
        topic_name,
        bootstrap_servers=_bootstrap_servers_from_env(),
        group_id=group_id,
        enable_auto_commit=False,
        auto_offset_reset=os.getenv("KAFKA_AUTO_OFFSET_RESET", "earliest"),
    )
    dlq_producer = _json_producer(KafkaProducer) if dlq_enabled else None
    print(
        f"[WORKER START] topic={topic_name} group_id={group_id} "
        f"dlq_enabled={dlq_enabled} dlq_topic={dlq_topic}"
    )

    def commit_offset(message: Any) -> None:
        partition = TopicPartition(message.topic, int(message.partition))
        offset = _offset_and_metadata(OffsetAndMetadata, int(message.offset) + 1)
        consumer.commit(offsets={partition: offset})
        print(
            f"[COMMIT] topic={message.topic} partition={message.partition} "
            f"offset={message.offset}"
        )

    def dead_letter(message: Any, reason: str, source_payload: Any) -> None:
        if _publish_to_dlq(
            dlq_producer,
            dlq_topic,
            message,
            reason=reason,
            source_payload=source_payload,
            timeout_seconds=dlq_timeout_seconds,
        ):
            commit_offset(message)
        else:
            print(
                f"[NO-COMMIT] topic={message.topic} partition={message.partition} "
                f"offset={message.offset} reason={reason}"
            )

    try:
        while True:
            batches = consumer.poll(timeout_ms=poll_timeout_ms, max_records=max_records)
            for records in (batches or {}).values():
                for message in records:
                    _process_kafka_message(
                        message,
                        client=client,
                        commit_offset=commit_offset,
                        dead_letter=dead_letter,
                    )
    except KeyboardInterrupt:
        print("[WORKER STOP] received keyboard interrupt")
        return 0
    except Exception as exc:
        print(f"[WORKER ERROR] {exc}")
        return 1
    finally:
        _close_quietly(consumer.close)
        if dlq_producer is not None:
            _close_quietly(lambda: dlq_producer.flush(timeout=dlq_timeout_seconds))
            _close_quietly(dlq_producer.close)
        client.close()


def _process_kafka_message(
    message: Any,
    *,
    client: XiaomiChannelClient,
    commit_offset: Any,
    dead_letter: Any,
) -> dict[str, Any] | None:
    try:
        payload = _deserialize_json_object(message.value)
    except Exception as exc:
        dead_letter(message, f"decode_failed: {exc}", message.value)
        return None

    internal_record = {
        "topic": message.topic,
        "partition": int(message.partition),
        "offset": int(message.offset),
        "value": payload,
    }
    result = handle_message(
        internal_record,
        send_tasks=client.send,
        commit=lambda _record: commit_offset(message),
        reject=lambda record, reason: dead_letter(message, reason, record.get("value")),
    )
    print(
        f"[RESULT] topic={message.topic} partition={message.partition} "
        f"offset={message.offset} status={result['status']} "
        f"should_commit={result['should_commit']} error={result['error']} "
        f"unrouted={len(result['unrouted_client_ids'])}"
    )
    return result


def _publish_to_dlq(
    producer: Any,
    dlq_topic: str,
    message: Any,
    *,
    reason: str,
    source_payload: Any,
    timeout_seconds: float,
) -> bool:
    if producer is None:
        return False

    dlq_payload = _build_dlq_payload(
        source_topic=message.topic,
        source_partition=int(message.partition),
        source_offset=int(message.offset),
        source_payload=source_payload,
        failure_reason=reason,
    )
    try:
        metadata = producer.send(dlq_topic, value=dlq_payload).get(timeout=timeout_seconds)
    except Exception as exc:
        print(
            f"[DLQ ERROR] source_topic={message.topic} source_partition={message.partition} "
            f"source_offset={message.offset} reason={reason} error={exc}"
        )
        return False

    print(
        f"[DLQ] source_offset={message.offset} dlq_topic={metadata.topic} "
        f"dlq_partition={metadata.partition} dlq_offset={metadata.offset} reason={reason}"
    )
    return True


def _import_kafka_python() -> tuple[Any, Any, Any, Any]:
    try:
        from kafka import KafkaConsumer, KafkaProducer, TopicPartition
        from kafka.structs import OffsetAndMetadata
    except Exception as exc:
        raise RuntimeError(
            "Kafka support requires `kafka-python`. Install with: pip install kafka-python"
        ) from exc
    return KafkaConsumer, KafkaProducer, TopicPartition, OffsetAndMetadata


def _json_producer(producer_type: Any) -> Any:
    return producer_type(
        bootstrap_servers=_bootstrap_servers_from_env(),
        value_serializer=_serialize_json_object,
        acks=os.getenv("KAFKA_PRODUCER_ACKS", "all"),
    )


def _bootstrap_servers_from_env() -> list[str]:
    raw = required_env("KAFKA_BOOTSTRAP_SERVERS")
    servers = [item.strip() for item in raw.split(",") if item.strip()]
    if not servers:
        raise RuntimeError("KAFKA_BOOTSTRAP_SERVERS must include at least one host:port")
    return servers


def _poll_timeout_ms_from_env() -> int:
    timeout_ms = int(float(os.getenv("KAFKA_POLL_TIMEOUT_SECONDS", "1.0")) * 1000)
    if timeout_ms <= 0:
        raise RuntimeError("KAFKA_POLL_TIMEOUT_SECONDS must be > 0")
    return timeout_ms


def _serialize_json_object(payload: Mapping[str, Any]) -> bytes:
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def _deserialize_json_object(raw: bytes | str | Mapping[str, Any]) -> dict[str, Any]:
    if isinstance(raw, Mapping):
        return dict(raw)
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    if not isinstance(raw, str):
        raise ValueError(f"Unsupported Kafka payload type: {type(raw).__name__}")

    parsed = json.loads(raw)
    if not isinstance(parsed, dict):
        raise ValueError("Kafka payload must decode to a JSON object")
    return parsed


def _build_dlq_payload(
    *,
    source_topic: str,
    source_partition: int,
    source_offset: int,
    source_payload: Any,
    failure_reason: str,
) -> dict[str, Any]:
    payload = {
        "event_type": f"{source_topic}.dlq",
        "failed_at": datetime.now(tz=UTC).isoformat(),
        "failure_reason": failure_reason,
        "source": {
            "topic": source_topic,
            "partition": source_partition,
            "offset": source_offset,
        },
        "payload": _to_json_compatible(source_payload),
    }

    if isinstance(source_payload, Mapping):
        event_id = source_payload.get("event_id")
        if isinstance(event_id, str) and event_id.strip():
            payload["source_event_id"] = event_id.strip()

    return payload


def _to_json_compatible(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {str(key): _to_json_compatible(item) for key, item in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_to_json_compatible(item) for item in value]
    return repr(value)


def _close_quietly(close: Any) -> None:
    try:
        close()
    except Exception as exc:
        print(f"[WORKER CLOSE ERROR] {exc}")


def _offset_and_metadata(offset_and_metadata_type: Any, offset: int) -> Any:
    """Build kafka-python OffsetAndMetadata across version signatures."""
    for extra in ((-1,), (None,), ()):
        try:
            return offset_and_metadata_type(offset, "", *extra)
        except TypeError:
            continue
    raise TypeError("Unsupported OffsetAndMetadata signature")
