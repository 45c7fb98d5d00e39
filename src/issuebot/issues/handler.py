"""Issue reference handler: ChatMessage in, NoticeOut/ActionOut out."""

from __future__ import annotations

from itertools import islice

from loguru import logger

from issuebot.core.constants import GUARDED_NICK
from issuebot.core.errors import IssueFetchError, MalformedReferenceError
from issuebot.events import ChatMessage, action_out, notice_out
from issuebot.gateway import Bus
from issuebot.issues.references import ReferenceMatch, extract_references, parse_reference
from issuebot.issues.responses import Response, select_responses
from issuebot.issues.tracker import TrackerClient
from issuebot.session import ChatSession


class IssueReferenceHandler:
    """Looks up every ``#<number>`` in a channel message and answers with a summary.

    Failures are per reference: logged, never sent to the channel, and never
    stop the remaining references of the same message.
    """

    def __init__(
        self,
        bus: Bus,
        session: ChatSession,
        tracker: TrackerClient,
        *,
        nickname: str,
        guarded_nick: str = GUARDED_NICK,
        max_references: int = 5,
    ) -> None:
        self._bus = bus
        self._session = session
        self._tracker = tracker
        self._nickname = nickname
        self._guarded = {guarded_nick.lower(), nickname.lower()}
        self._max_references = max_references

    def accept_event(self, source: str, evt: object) -> bool:
        """Accept channel messages, except those from the guarded bot identity."""
        if not isinstance(evt, ChatMessage) or evt.is_action:
            return False
        if evt.author.lower() in self._guarded:
            logger.debug("Ignoring message from guarded nick {}", evt.author)
            return False
        return True

    def push_event(self, source: str, evt: object) -> None:
        if not isinstance(evt, ChatMessage) or "#" not in evt.content:
            return
        self._session.spawn(self.handle(evt), name=f"issues:{evt.channel}")

    async def handle(self, evt: ChatMessage) -> None:
        """Resolve references in order of appearance, one at a time."""
        matches = extract_references(evt.content)
        for match in islice(matches, self._max_references):
            await self._handle_match(evt, match)
        if next(matches, None) is not None:
            logger.warning(
                "{} in {} mentioned more than {} issues; ignoring the rest",
                evt.author,
                evt.channel,
                self._max_references,
            )

    async def _handle_match(self, evt: ChatMessage, match: ReferenceMatch) -> None:
        try:
            ref = parse_reference(match)
            issue = await self._tracker.fetch_issue(ref.magnitude)
        except MalformedReferenceError as exc:
            logger.warning("Skipping reference #{}: {}", match.raw[:32], exc)
            return
        except IssueFetchError as exc:
            logger.warning("Issue lookup #{} failed ({}): {}", match.raw, exc.code, exc)
            return

        responses = select_responses(
            ref,
            issue,
            author=evt.author,
            nickname=self._nickname,
            owner=self._tracker.owner,
            repo=self._tracker.repo,
        )
        for response in responses:
            self._emit(evt.channel, response)

    def _emit(self, channel: str, response: Response) -> None:
        factory = notice_out if response.kind == "notice" else action_out
        _, out = factory(channel, response.text)
        if response.delay > 0:
            self._session.defer(response.delay, "issues", out)
        else:
            self._bus.publish("issues", out)
