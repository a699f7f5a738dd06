"""Portfolio-level calculations over projected assets."""

from src.engine.portfolio.summary import PortfolioSummary, calc_portfolio_summary

__all__ = ["PortfolioSummary", "calc_portfolio_summary"]
