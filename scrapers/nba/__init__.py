"""NBA roster 3PM check: roster API, NBA.com scraping, shared results ledger."""
