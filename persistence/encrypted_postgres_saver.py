from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from langgraph.checkpoint.postgres import PostgresSaver
from langchain_core.runnables import RunnableConfig
from langgraph.checkpoint.base import Checkpoint, CheckpointMetadata, ChannelVersions, CheckpointTuple

from .crypto import FieldCipher

VALUES_CHANNEL = "values"
EDITS_CHANNEL = "edits"
INPUT_CHANNEL = "__start__"
SEALED_CHANNELS = frozenset({VALUES_CHANNEL, EDITS_CHANNEL})
DEFAULT_SEALED_FIELDS = frozenset({"accountNumber", "confirmAccountNumber", "ifscCode"})


def draft_aad(config: RunnableConfig, channel: str = VALUES_CHANNEL) -> bytes:
    thread_id = config["configurable"]["thread_id"]
    checkpoint_ns = config["configurable"].get("checkpoint_ns", "")
    return f"{thread_id}|{checkpoint_ns}|{channel}".encode("utf-8")


def seal_values(cipher: FieldCipher, values: Dict[str, Any], keys: Iterable[str], aad: bytes) -> Dict[str, Any]:
    keys = set(keys)
    sealed = {}
    for k, v in values.items():
        if k in keys and isinstance(v, str):
            sealed[k] = {"__enc__": cipher.encrypt_text(v, aad + b"|" + k.encode())}
        else:
            sealed[k] = v
    return sealed


def open_values(cipher: FieldCipher, values: Dict[str, Any], aad: bytes) -> Dict[str, Any]:
    opened = {}
    for k, v in values.items():
        if isinstance(v, dict) and "__enc__" in v:
            opened[k] = cipher.decrypt_text(v["__enc__"], aad + b"|" + k.encode())
        else:
            opened[k] = v
    return opened


def seal_channel(cipher: FieldCipher, config: RunnableConfig, channel: str, value: Any, keys: Iterable[str]) -> Any:
    """Seal one channel value. The graph input is sealed per channel it carries."""
    if not isinstance(value, dict):
        return value
    if channel in SEALED_CHANNELS:
        return seal_values(cipher, value, keys, draft_aad(config, channel))
    if channel == INPUT_CHANNEL:
        return {k: seal_channel(cipher, config, k, v, keys) if k in SEALED_CHANNELS else v for k, v in value.items()}
    return value


def open_channel(cipher: FieldCipher, config: RunnableConfig, channel: str, value: Any) -> Any:
    if not isinstance(value, dict):
        return value
    if channel in SEALED_CHANNELS:
        return open_values(cipher, value, draft_aad(config, channel))
    if channel == INPUT_CHANNEL:
        return {k: open_channel(cipher, config, k, v) if k in SEALED_CHANNELS else v for k, v in value.items()}
    return value


class SealedDraftPostgresSaver(PostgresSaver):
    """
    PostgresSaver for registration drafts that keeps bank details encrypted
    at rest.

    The listed keys are sealed wherever they travel: inside the ``values``
    and ``edits`` channels, inside the graph input held in ``__start__``,
    and in the per-task writes stored next to each checkpoint.
    ``config["configurable"]["encrypt_keys"]`` overrides the default set.
    """

    def __init__(self, conn, cipher: Optional[FieldCipher] = None, **kwargs):
        super().__init__(conn, **kwargs)
        self.cipher = cipher or FieldCipher.from_env()

    @staticmethod
    def _encrypt_keys(config: RunnableConfig) -> Iterable[str]:
        return config["configurable"].get("encrypt_keys", DEFAULT_SEALED_FIELDS)

    def put(
        self,
        config: RunnableConfig,
        checkpoint: Checkpoint,
        metadata: CheckpointMetadata,
        new_versions: ChannelVersions,
    ) -> RunnableConfig:
        keys = self._encrypt_keys(config)

        cp = dict(checkpoint)
        cp["channel_values"] = {
            channel: seal_channel(self.cipher, config, channel, value, keys)
            for channel, value in cp.get("channel_values", {}).items()
        }

        # older releases copy node outputs into metadata["writes"] unsealed
        metadata = {k: v for k, v in metadata.items() if k != "writes"}

        return super().put(config, cp, metadata, new_versions)

    def put_writes(
        self,
        config: RunnableConfig,
        writes: Sequence[Tuple[str, Any]],
        task_id: str,
        task_path: str = "",
    ) -> None:
        keys = self._encrypt_keys(config)
        sealed = [(channel, seal_channel(self.cipher, config, channel, value, keys)) for channel, value in writes]
        return super().put_writes(config, sealed, task_id, task_path)

    def _open_checkpoint(self, config: RunnableConfig, cp: dict) -> dict:
        cv = cp.get("channel_values", {})
        if not isinstance(cv, dict):
            return cp

        new_cp = dict(cp)
        new_cp["channel_values"] = {
            channel: open_channel(self.cipher, config, channel, value) for channel, value in cv.items()
        }
        return new_cp

    def _opened(self, config: RunnableConfig, t: CheckpointTuple) -> CheckpointTuple:
        cfg = t.config or config
        pending_writes = t.pending_writes
        if pending_writes is not None:
            pending_writes = [
                (task_id, channel, open_channel(self.cipher, cfg, channel, value))
                for task_id, channel, value in pending_writes
            ]
        return CheckpointTuple(
            config=t.config,
            checkpoint=self._open_checkpoint(cfg, t.checkpoint),
            metadata=t.metadata,
            parent_config=t.parent_config,
            pending_writes=pending_writes,
        )

    def get_tuple(self, config: RunnableConfig):
        t = super().get_tuple(config)
        if t is None:
            return None
        return self._opened(config, t)

    def list(self, config: Optional[RunnableConfig], *args, **kwargs):
        for t in super().list(config, *args, **kwargs):
            yield self._opened(config, t)
