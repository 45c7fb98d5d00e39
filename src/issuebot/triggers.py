"""Trigger phrases: an ordered table of (pattern, canned response) rules.

Rules are independent of the issue lookup pipeline; every rule whose pattern
occurs in a message fires once. ``{nick}`` in a template is the author.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from loguru import logger

from issuebot.core.constants import GUARDED_NICK, OutboundKind
from issuebot.events import ChatMessage, action_out, notice_out
from issuebot.gateway import Bus


@dataclass(frozen=True)
class TriggerRule:
    pattern: re.Pattern[str]
    template: str
    kind: OutboundKind = "action"

    def render(self, nick: str) -> str:
        return self.template.format(nick=nick)


def rule(pattern: str, template: str, kind: OutboundKind = "action") -> TriggerRule:
    return TriggerRule(re.compile(pattern), template, kind)


# Zalgo text; contains a zero-width space and no braces
PONY = "ZA̡͊͠͝LGΌ ISͮ̂҉̯͈͕̹̘̱ TO͇̹̺ͅƝ̴ȳ̳ TH̘Ë͖́̉ ͠P̯͍̭O̚​N̐Y̡ H̸̡̪̯ͨ͊̽̅̾̎Ȩ̬̩̾͛ͪ̈́̀́͘ ̶̧̨̱̹̭̯ͧ̾ͬC̷̙̲̝͖ͭ̏ͥͮ͟Oͮ͏̮̪̝͍M̲̖͊̒ͪͩͬ̚̚͜Ȇ̴̟̟͙̞ͩ͌͝S̨̥̫͎̭ͯ̿̔̀ͅ"  # noqa: E501


RULES: tuple[TriggerRule, ...] = (
    rule(r"#(kitten|cat)", "starts to meow at {nick}… *purr* *purr*"),
    rule(r"#dog", "rolls over, and wants its tummy scratched by {nick}"),
    rule(r"#champagne", "opens a nice chilled bottle of Moët & Chandon for {nick}"),
    rule(r"#beer", "$this->app['bartender']->setDrink('beer')->setTab('{nick}')->serveAll();"),
    rule(r"#coffee", "turns on the espresso machine for {nick}"),
    rule(r"#hotchocolate", "believes in miracles, {nick}, you sexy thing!"),
    rule(r"#tea", "has boiled some water, and begins to brew {nick} a nice cup of tea."),
    rule(r"#wine", "opens a bottle of Château Lafite at {nick}'s request!"),
    rule(r"#whisky", "pours a nip of Glenavon Special for {nick}."),
    rule(
        r"#whiskey",
        "takes a swig of Jameson, hands the bottle to {nick}, and sings - "
        '"Whack fol de daddy-o, There\'s whiskey in the jar."',
    ),
    rule(r"#shiraz", "wonders if {nick} has ever had a Heathcote Estate Shiraz?"),
    rule(r"#rum", "grabs a bottle of rum, passes it to {nick} and starts singing pirate songs"),
    rule(r"#water", "pours water over {nick}…  That is what they wanted, right?"),
    rule(
        r"#(PR|pr|Pr|pR)",
        "gets the idea that Bopp should take care of {nick}'s pull requests or kittens may cry…",
    ),
    rule(
        r"#vodka",
        "opens a bottle of Billionaire Vodka for {nick}.  It's good to be the king after all!",
    ),
    rule(r"#koala", "passes some eucalyptus leaves to {nick}."),
    rule(r"#ninja", "visits http://{nick}.is-a-sneaky.ninja/"),
    rule(
        r"#upstream",
        "Maybe somebody screwed up somewhere... Perhaps {nick} knows what happened?",
    ),
    rule(r"#popcorn", "yells: POPCORN! GET YOUR POPCORN!"),
    rule(
        r"#pastebin",
        "asks that http://pastebin.com/ be used for more than one-line messages. "
        "It makes life easier.",
    ),
    rule(r"#(pony|mylittlepony)", f'says "{PONY}"'),
    rule(r"#tequila", "drinks one Tequila, two Tequilas, three Tequilas… floor!"),
    rule(r"#nicotine", "coughs and opens the windows…"),
    rule(r"OCD", "s/OCD/CDO/ …must be in alphabetical order…"),
    rule(
        r"#git",
        "says you have three choices: 1. man git, 2. nicely ask gawainlynch, "
        "or 3. do it the xkcd way: https://xkcd.com/1597/",
    ),
    rule(
        r"#(BPFL|bpfl)",
        "exclaims loudly: 'All bow for our Benevolent Princess for Life, the Monarch of "
        "Australia, strangler of drop bears and catcher of koalas: gawainlynch!'",
    ),
    rule(
        r"#(BDFL|bdfl|BoltBorn|Boltborn|boltborn)",
        "starts to sing: 'Boltborn, Boltborn, by his honor is sworn, to keep featurebloat "
        "forever at bay! And the fiercest foes rout when they hear our BDFL's shout, "
        "Boltborn, for your blessing we pray!'",
    ),
    rule(
        r"#(KoalaBugs|Koalabugs)",
        "thinks he saw something small and furry scurry away from github. "
        "Somebody better check for #KoalaBugs...",
    ),
    rule(r"#(http418|http 418)", "418 I'm a teapot"),
    rule(
        r"#(friday|Friday)",
        "assumes that {nick} will spend all weekend fixing bugs in Bolt, right?",
    ),
    rule(r"#soup", "pours {nick} a nice warm bowl of soup"),
)


def matching_rules(text: str, rules: tuple[TriggerRule, ...] = RULES) -> list[TriggerRule]:
    """Rules that fire for text, in table order."""
    return [r for r in rules if r.pattern.search(text)]


class TriggerHandler:
    """Answers trigger phrases with their canned response."""

    def __init__(
        self,
        bus: Bus,
        *,
        rules: tuple[TriggerRule, ...] = RULES,
        guarded_nick: str = GUARDED_NICK,
    ) -> None:
        self._bus = bus
        self._rules = rules
        self._guarded = guarded_nick.lower()

    def accept_event(self, source: str, evt: object) -> bool:
        return (
            isinstance(evt, ChatMessage)
            and not evt.is_action
            and evt.author.lower() != self._guarded
        )

    def push_event(self, source: str, evt: object) -> None:
        if not isinstance(evt, ChatMessage):
            return
        for r in matching_rules(evt.content, self._rules):
            factory = notice_out if r.kind == "notice" else action_out
            _, out = factory(evt.channel, r.render(evt.author))
            logger.debug("Trigger {} fired for {}", r.pattern.pattern, evt.author)
            self._bus.publish("triggers", out)
