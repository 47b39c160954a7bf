from column_scrub.cli import app

app()
