from echo.cli import cli

cli()
