import logging
import sys

# atributos que todo LogRecord já tem; o resto veio de `extra=`
_RESERVED = set(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "extra", "taskName"}


class SafeExtraFormatter(logging.Formatter):
    """
    Formatter que renderiza o que veio em `extra={...}` como
    `chave=valor` no fim da linha, e não quebra quando o LogRecord
    não tem extra nenhum.
    """

    def format(self, record: logging.LogRecord) -> str:
        fields = {
            k: v for k, v in record.__dict__.items()
            if k not in _RESERVED and not k.startswith("_")
        }
        record.extra = " ".join(f"{k}={v!r}" for k, v in sorted(fields.items())) or "-"
        return super().format(record)


def setup_logging(level: str = "INFO") -> None:
    handler = logging.StreamHandler(sys.stdout)

    formatter = SafeExtraFormatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s | %(extra)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level.upper())
    root.handlers.clear()
    root.addHandler(handler)

    # uvicorn traz os próprios handlers; deixa propagar para o root
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).handlers.clear()
        logging.getLogger(name).propagate = True
