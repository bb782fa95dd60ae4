from ._main import build_arg_parser
from .builder import (
    ALL,
    Session,
    SessionConfig,
    build_session,
    coerce_pool_size,
    filter_corpus,
    fisher_yates,
)
from .config import (
    ConfigOverrides,
    TrainerConfig,
    TrainerConfigError,
    load_config,
)
from .cursor import AnswerEvent, DisplayOption, SessionCursor
from .engine import LoadTicket, TrainerEngine, TrainerSnapshot
from .loader import (
    CorpusLoadResult,
    CorpusSource,
    SourceLoadError,
    load_corpus,
    load_source,
    read_source_rows,
)
from .progress import ProgressTracker, completion_percent
from .records import (
    QuestionRecord,
    Slot,
    build_question_record,
    iter_question_records,
)
from .session import (
    SessionCommand,
    TrainerSessionResult,
    parse_session_command,
    run_trainer_session,
)
from .view import QuestionPanel, TrainerApp

__all__ = [
    "build_arg_parser",
    "ALL",
    "Session",
    "SessionConfig",
    "build_session",
    "coerce_pool_size",
    "filter_corpus",
    "fisher_yates",
    "ConfigOverrides",
    "TrainerConfig",
    "TrainerConfigError",
    "load_config",
    "AnswerEvent",
    "DisplayOption",
    "SessionCursor",
    "LoadTicket",
    "TrainerEngine",
    "TrainerSnapshot",
    "CorpusLoadResult",
    "CorpusSource",
    "SourceLoadError",
    "load_corpus",
    "load_source",
    "read_source_rows",
    "ProgressTracker",
    "completion_percent",
    "QuestionRecord",
    "Slot",
    "build_question_record",
    "iter_question_records",
    "SessionCommand",
    "TrainerSessionResult",
    "parse_session_command",
    "run_trainer_session",
    "QuestionPanel",
    "TrainerApp",
]
