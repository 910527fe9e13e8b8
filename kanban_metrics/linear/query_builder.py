"""GraphQL query construction for the Linear issues endpoint."""

import logging
import re

logger = logging.getLogger(__name__)

UUID_PATTERN = re.compile(
    r"\A[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}\Z",
    re.IGNORECASE,
)

HISTORY_PAGE_SIZE = 50

ISSUES_QUERY = """\
query Issues($first: Int!, $after: String, $filter: IssueFilter, $includeArchived: Boolean) {
  issues(first: $first, after: $after, filter: $filter, includeArchived: $includeArchived) {
    pageInfo { hasNextPage endCursor }
    nodes {
      id identifier title
      state { id name type }
      team { id name }
      assignee { id name }
      priority estimate createdAt updatedAt completedAt startedAt archivedAt
      history(first: %d) {
        nodes {
          id createdAt
          fromState { id name type }
          toState { id name type }
        }
      }
    }
  }
}
""" % HISTORY_PAGE_SIZE


class QueryBuilder:
    """Build the paginated issues query and its variables from QueryOptions."""

    def build_issues_query(self, options, after_cursor=None):
        """Return a ``(query, variables)`` pair for one page."""
        variables = {"first": options.page_size}

        if after_cursor:
            variables["after"] = after_cursor

        issue_filter = self.build_filter(options)
        if issue_filter:
            variables["filter"] = issue_filter

        if options.include_archived:
            variables["includeArchived"] = True

        logger.debug("Issues query variables: %s", variables)
        return ISSUES_QUERY, variables

    def build_filter(self, options):
        """Return the IssueFilter for team and date range, or None."""
        issue_filter = {}

        if options.team_id:
            issue_filter["team"] = team_filter(options.team_id)

        updated_at = date_filter(options.start_date, options.end_date)
        if updated_at:
            issue_filter["updatedAt"] = updated_at

        return issue_filter or None


def team_filter(team_identifier):
    """Filter by team id for UUIDs, otherwise by team key (e.g. "ROI")."""
    if UUID_PATTERN.match(team_identifier):
        return {"id": {"eq": team_identifier}}
    return {"key": {"eq": team_identifier}}


def date_filter(start_date, end_date):
    """Inclusive `updatedAt` range covering whole days in UTC."""
    conditions = {}
    if start_date:
        conditions["gte"] = f"{start_date}T00:00:00.000Z"
    if end_date:
        conditions["lte"] = f"{end_date}T23:59:59.999Z"
    return conditions
