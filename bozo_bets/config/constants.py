"""
NFL calendar, team and betting vocabulary constants.

Season kickoff dates, the 32 team nicknames with their common
abbreviations, and the betting shorthand recognised when matching
free-text prop bets.
"""
from datetime import date, timedelta

# =============================================================================
# SEASON CALENDAR
# =============================================================================

# Thursday season openers (week 1 kickoff)
SEASON_KICKOFFS: dict[int, date] = {
    2025: date(2025, 9, 4),
    2026: date(2026, 9, 3),
    2027: date(2027, 9, 2),
    2028: date(2028, 9, 7),
    2029: date(2029, 9, 6),
    2030: date(2030, 9, 5),
}

REGULAR_SEASON_WEEKS = 18
MIN_SEASON = 2020

# Bet windows open on the Tuesday before each week's Thursday game
WINDOW_LEAD_DAYS = 2

# A week is ready to settle this long after its last kickoff
GAME_PROCESSING_DELAY = timedelta(hours=4)
PROCESSING_WINDOW = timedelta(hours=1)

# =============================================================================
# TEAMS
# =============================================================================

TEAM_NAMES: dict[str, list[str]] = {
    "eagles": ["phi", "philadelphia", "philly"],
    "cowboys": ["dal", "dallas"],
    "giants": ["nyg", "new york giants"],
    "commanders": ["was", "washington", "redskins"],
    "packers": ["gb", "green bay"],
    "bears": ["chi", "chicago"],
    "lions": ["det", "detroit"],
    "vikings": ["min", "minnesota"],
    "saints": ["no", "new orleans"],
    "falcons": ["atl", "atlanta"],
    "panthers": ["car", "carolina"],
    "buccaneers": ["tb", "tampa bay", "tampa", "bucs"],
    "rams": ["lar", "los angeles rams", "st louis rams"],
    "cardinals": ["ari", "arizona"],
    "seahawks": ["sea", "seattle"],
    "49ers": ["sf", "san francisco", "niners"],
    "patriots": ["ne", "new england", "pats"],
    "bills": ["buf", "buffalo"],
    "dolphins": ["mia", "miami"],
    "jets": ["nyj", "new york jets"],
    "steelers": ["pit", "pittsburgh"],
    "ravens": ["bal", "baltimore"],
    "bengals": ["cin", "cincinnati"],
    "browns": ["cle", "cleveland"],
    "texans": ["hou", "houston"],
    "colts": ["ind", "indianapolis"],
    "jaguars": ["jax", "jacksonville", "jags"],
    "titans": ["ten", "tennessee"],
    "broncos": ["den", "denver"],
    "chiefs": ["kc", "kansas city"],
    "raiders": ["lv", "las vegas", "oakland"],
    "chargers": ["lac", "los angeles chargers", "san diego chargers"],
}

# Abbreviations that are also English words. They only count as a team when
# typed in capitals inside otherwise mixed-case text ("Kamara NO rush yds").
AMBIGUOUS_TEAM_ABBREVIATIONS: frozenset[str] = frozenset(
    {"no", "was", "min", "car", "sea", "ten", "den", "pit", "ind"}
)

# =============================================================================
# BETTING VOCABULARY
# =============================================================================

# Standard term -> shorthand a user might type. Variations are unique across
# the table and never equal another standard term.
BETTING_TERMS: dict[str, list[str]] = {
    "moneyline": ["ml", "money line"],
    "spread": ["point spread", "ats"],
    "total": ["over/under", "o/u", "points total", "total points", "game total"],
    "passing yards": ["pass yds", "pass yards", "passing yds", "py"],
    "rushing yards": ["rush yds", "rush yards", "rushing yds", "ry"],
    "receiving yards": ["rec yds", "rec yards", "receiving yds", "recy"],
    "passing touchdowns": ["pass tds", "passing tds", "passing td", "ptd"],
    "rushing touchdowns": ["rush tds", "rushing tds", "rushing td", "rtd"],
    "receiving touchdowns": ["rec tds", "receiving tds", "receiving td", "rectd"],
    "anytime touchdown": ["anytime td", "atd", "atts"],
    "receptions": ["rec", "catches", "reception"],
    "interceptions": ["ints", "interception"],
    "completions": ["comp", "completion", "cmp"],
    "attempts": ["att", "attempt"],
    "sacks": ["sack"],
    "field goals": ["fg", "fgs", "field goal"],
    "extra points": ["xp", "extra point", "pat"],
    "first downs": ["first down", "1st downs"],
    "touchdown": ["td"],
    "quarterback": ["qb"],
    "running back": ["rb"],
    "wide receiver": ["wr"],
    "tight end": ["te"],
    "favorite": ["fav", "fave", "chalk"],
    "underdog": ["dog"],
    "over": ["o"],
    "under": ["u"],
    "halftime": ["ht"],
    "overtime": ["ot"],
    "super bowl": ["sb"],
}

# Words marking the end of a player's name when no team is present
PROP_INDICATORS: frozenset[str] = frozenset(
    {
        "passing",
        "rushing",
        "receiving",
        "yards",
        "touchdowns",
        "receptions",
        "completions",
        "attempts",
        "over",
        "under",
    }
)

TEAM_PROP_TYPES: frozenset[str] = frozenset({"moneyline", "spread", "total"})

MAX_PROP_SUGGESTIONS = 5

# =============================================================================
# ODDS API
# =============================================================================

ODDS_MARKET_LABELS: dict[str, str] = {
    "h2h": "Moneyline",
    "spreads": "Point Spread",
    "totals": "Total Points",
}
