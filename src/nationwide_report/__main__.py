from nationwide_report import cli

cli.app()
