"""Shared fakes for the goodfirst test suite."""

import asyncio


def make_metadata(repo_id=1, archived=False, **overrides):
    payload = {
        "id": repo_id,
        "archived": archived,
        "description": "A test repository",
        "language": "Python",
        "html_url": f"https://github.com/owner/repo{repo_id}",
        "stargazers_count": 42,
        "pushed_at": "2024-03-01T12:00:00Z",
    }
    payload.update(overrides)
    return payload

def make_issues(count, start=1):
    return [
        {
            "title": f"Issue {number}",
            "html_url": f"https://github.com/owner/repo/issues/{number}",
            "number": number,
            "comments": number % 3,
            "created_at": "2024-02-0%dT08:30:00Z" % (1 + number % 9),
        }
        for number in range(start, start + count)
    ]

class FakeGitHubClient:
    """In-memory stand-in for GitHubRESTClient keyed by owner/name."""

    def __init__(self, metadata=None, issues=None, delay=0.01):
        self.metadata = metadata or {}
        self.issues = issues or {}
        self.delay = delay
        self.calls = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def _respond(self, table, kind, owner, name):
        full_name = f"{owner}/{name}"
        self.calls.append((kind, full_name))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            value = table.get(full_name)
            if isinstance(value, BaseException):
                raise value
            return value
        finally:
            self.in_flight -= 1

    async def get_repository(self, owner, name):
        return await self._respond(self.metadata, "metadata", owner, name)

    async def get_good_first_issues(self, owner, name):
        return await self._respond(self.issues, "issues", owner, name)

class MemoryStore:
    """Store double recording every write."""

    def __init__(self, state=None, read_error=None):
        self.state = state
        self.read_error = read_error
        self.reads = 0
        self.writes = []

    def read_store(self):
        self.reads += 1
        if self.read_error:
            raise self.read_error
        return self.state

    def write_store(self, state):
        self.writes.append(state)
        self.state = state
