from .customer import Customer  # noqa: F401
from .tracking import JiraIssue, ZendeskTicket  # noqa: F401
from .snapshot import JiraIssueSnapshot, ZendeskTicketSnapshot  # noqa: F401
