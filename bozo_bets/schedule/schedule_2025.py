"""
Bundled 2025 regular-season schedule, weeks 1-4.

Rows are ``(game_id, week, kickoff, home_team, away_team, game_type)`` with
kickoff in US/Eastern wall-clock time. Later weeks are loaded through
``POST /api/management/nfl-schedule``.
"""

SEASON_2025 = 2025

# fmt: off
SCHEDULE_2025 = [
    # Week 1 - September 4-8, 2025
    ("week1-thursday", 1, "2025-09-04T20:20", "Philadelphia Eagles", "Dallas Cowboys", "THURSDAY"),
    ("week1-friday", 1, "2025-09-05T20:00", "Los Angeles Chargers", "Kansas City Chiefs", "FRIDAY"),
    ("week1-sunday-early-1", 1, "2025-09-07T13:00", "Atlanta Falcons", "Tampa Bay Buccaneers", "SUNDAY"),
    ("week1-sunday-early-2", 1, "2025-09-07T13:00", "Cleveland Browns", "Cincinnati Bengals", "SUNDAY"),
    ("week1-sunday-early-3", 1, "2025-09-07T13:00", "Indianapolis Colts", "Miami Dolphins", "SUNDAY"),
    ("week1-sunday-early-4", 1, "2025-09-07T13:00", "Jacksonville Jaguars", "Carolina Panthers", "SUNDAY"),
    ("week1-sunday-early-5", 1, "2025-09-07T13:00", "New England Patriots", "Las Vegas Raiders", "SUNDAY"),
    ("week1-sunday-early-6", 1, "2025-09-07T13:00", "New Orleans Saints", "Arizona Cardinals", "SUNDAY"),
    ("week1-sunday-early-7", 1, "2025-09-07T13:00", "New York Jets", "Pittsburgh Steelers", "SUNDAY"),
    ("week1-sunday-early-8", 1, "2025-09-07T13:00", "Washington Commanders", "New York Giants", "SUNDAY"),
    ("week1-sunday-late-1", 1, "2025-09-07T16:05", "Denver Broncos", "Tennessee Titans", "SUNDAY"),
    ("week1-sunday-late-2", 1, "2025-09-07T16:05", "Seattle Seahawks", "San Francisco 49ers", "SUNDAY"),
    ("week1-sunday-late-3", 1, "2025-09-07T16:25", "Green Bay Packers", "Detroit Lions", "SUNDAY"),
    ("week1-sunday-late-4", 1, "2025-09-07T16:25", "Los Angeles Rams", "Houston Texans", "SUNDAY"),
    ("week1-sunday-night", 1, "2025-09-07T20:20", "Buffalo Bills", "Baltimore Ravens", "SUNDAY"),
    ("week1-monday", 1, "2025-09-08T20:15", "Chicago Bears", "Minnesota Vikings", "MONDAY"),
    # Week 2 - September 11-15, 2025
    ("week2-thursday", 2, "2025-09-11T20:15", "Houston Texans", "Kansas City Chiefs", "THURSDAY"),
    ("week2-sunday-early-1", 2, "2025-09-14T13:00", "Atlanta Falcons", "Carolina Panthers", "SUNDAY"),
    ("week2-sunday-early-2", 2, "2025-09-14T13:00", "Cincinnati Bengals", "Pittsburgh Steelers", "SUNDAY"),
    ("week2-sunday-early-3", 2, "2025-09-14T13:00", "Cleveland Browns", "Baltimore Ravens", "SUNDAY"),
    ("week2-sunday-early-4", 2, "2025-09-14T13:00", "Jacksonville Jaguars", "Tennessee Titans", "SUNDAY"),
    ("week2-sunday-early-5", 2, "2025-09-14T13:00", "Miami Dolphins", "Buffalo Bills", "SUNDAY"),
    ("week2-sunday-early-6", 2, "2025-09-14T13:00", "New England Patriots", "New York Jets", "SUNDAY"),
    ("week2-sunday-early-7", 2, "2025-09-14T13:00", "New York Giants", "Washington Commanders", "SUNDAY"),
    ("week2-sunday-early-8", 2, "2025-09-14T13:00", "Tampa Bay Buccaneers", "New Orleans Saints", "SUNDAY"),
    ("week2-sunday-late-1", 2, "2025-09-14T16:05", "Denver Broncos", "Las Vegas Raiders", "SUNDAY"),
    ("week2-sunday-late-2", 2, "2025-09-14T16:05", "Seattle Seahawks", "Arizona Cardinals", "SUNDAY"),
    ("week2-sunday-late-3", 2, "2025-09-14T16:25", "Detroit Lions", "Green Bay Packers", "SUNDAY"),
    ("week2-sunday-late-4", 2, "2025-09-14T16:25", "Los Angeles Rams", "San Francisco 49ers", "SUNDAY"),
    ("week2-sunday-night", 2, "2025-09-14T20:20", "Dallas Cowboys", "Philadelphia Eagles", "SUNDAY"),
    ("week2-monday", 2, "2025-09-15T20:15", "Indianapolis Colts", "Minnesota Vikings", "MONDAY"),
    # Week 3 - September 18-22, 2025
    ("week3-thursday", 3, "2025-09-18T20:15", "New York Jets", "New England Patriots", "THURSDAY"),
    ("week3-sunday-early-1", 3, "2025-09-21T13:00", "Carolina Panthers", "Tampa Bay Buccaneers", "SUNDAY"),
    ("week3-sunday-early-2", 3, "2025-09-21T13:00", "Cincinnati Bengals", "Cleveland Browns", "SUNDAY"),
    ("week3-sunday-early-3", 3, "2025-09-21T13:00", "Jacksonville Jaguars", "Indianapolis Colts", "SUNDAY"),
    ("week3-sunday-early-4", 3, "2025-09-21T13:00", "Miami Dolphins", "New York Jets", "SUNDAY"),
    ("week3-sunday-early-5", 3, "2025-09-21T13:00", "New Orleans Saints", "Atlanta Falcons", "SUNDAY"),
    ("week3-sunday-early-6", 3, "2025-09-21T13:00", "Pittsburgh Steelers", "Baltimore Ravens", "SUNDAY"),
    ("week3-sunday-early-7", 3, "2025-09-21T13:00", "Tennessee Titans", "Houston Texans", "SUNDAY"),
    ("week3-sunday-early-8", 3, "2025-09-21T13:00", "Washington Commanders", "Dallas Cowboys", "SUNDAY"),
    ("week3-sunday-late-1", 3, "2025-09-21T16:05", "Arizona Cardinals", "Seattle Seahawks", "SUNDAY"),
    ("week3-sunday-late-2", 3, "2025-09-21T16:05", "Denver Broncos", "Kansas City Chiefs", "SUNDAY"),
    ("week3-sunday-late-3", 3, "2025-09-21T16:25", "Green Bay Packers", "Minnesota Vikings", "SUNDAY"),
    ("week3-sunday-late-4", 3, "2025-09-21T16:25", "Los Angeles Chargers", "Las Vegas Raiders", "SUNDAY"),
    ("week3-sunday-night", 3, "2025-09-21T20:20", "San Francisco 49ers", "Los Angeles Rams", "SUNDAY"),
    ("week3-monday", 3, "2025-09-22T20:15", "Buffalo Bills", "Chicago Bears", "MONDAY"),
    # Week 4 - September 25-29, 2025
    ("week4-thursday", 4, "2025-09-25T20:15", "Tampa Bay Buccaneers", "Atlanta Falcons", "THURSDAY"),
    ("week4-sunday-early-1", 4, "2025-09-28T13:00", "Carolina Panthers", "New Orleans Saints", "SUNDAY"),
    ("week4-sunday-early-2", 4, "2025-09-28T13:00", "Cincinnati Bengals", "Jacksonville Jaguars", "SUNDAY"),
    ("week4-sunday-early-3", 4, "2025-09-28T13:00", "Cleveland Browns", "Pittsburgh Steelers", "SUNDAY"),
    ("week4-sunday-early-4", 4, "2025-09-28T13:00", "Indianapolis Colts", "Tennessee Titans", "SUNDAY"),
    ("week4-sunday-early-5", 4, "2025-09-28T13:00", "Miami Dolphins", "New England Patriots", "SUNDAY"),
    ("week4-sunday-early-6", 4, "2025-09-28T13:00", "New York Giants", "Philadelphia Eagles", "SUNDAY"),
    ("week4-sunday-early-7", 4, "2025-09-28T13:00", "Washington Commanders", "Baltimore Ravens", "SUNDAY"),
    ("week4-sunday-late-1", 4, "2025-09-28T16:05", "Arizona Cardinals", "Denver Broncos", "SUNDAY"),
    ("week4-sunday-late-2", 4, "2025-09-28T16:05", "Seattle Seahawks", "San Francisco 49ers", "SUNDAY"),
    ("week4-sunday-late-3", 4, "2025-09-28T16:25", "Detroit Lions", "Minnesota Vikings", "SUNDAY"),
    ("week4-sunday-late-4", 4, "2025-09-28T16:25", "Los Angeles Chargers", "Kansas City Chiefs", "SUNDAY"),
    ("week4-sunday-night", 4, "2025-09-28T20:20", "Dallas Cowboys", "New York Jets", "SUNDAY"),
    ("week4-monday", 4, "2025-09-29T20:15", "Las Vegas Raiders", "Houston Texans", "MONDAY"),
]
# fmt: on
