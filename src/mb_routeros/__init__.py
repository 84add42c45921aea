"""Client for the binary API protocol of network appliances."""

from mb_routeros.config import Config as Config
from mb_routeros.errors import ApiError as ApiError
from mb_routeros.errors import AuthFailed as AuthFailed
from mb_routeros.errors import CommandFailed as CommandFailed
from mb_routeros.errors import ConnectFailed as ConnectFailed
from mb_routeros.protocol import Batch as Batch
from mb_routeros.protocol import Command as Command
from mb_routeros.protocol import Row as Row
from mb_routeros.protocol import Single as Single
from mb_routeros.session import RowStream as RowStream
from mb_routeros.session import Session as Session
from mb_routeros.session import StreamOutcome as StreamOutcome
