from poolladder.models.player import PlayerRow
from poolladder.models.match import MatchRow
from poolladder.models.ladder import LadderMeta
from poolladder.models.audit_log import AuditLog
