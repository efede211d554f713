"""
FastAPI backend for NFL Bozo Bets.

Provides REST API endpoints for:
- Accounts, users and teams
- Weekly bets and payments
- Management and leaderboards
- Props, odds and scheduler control
"""
