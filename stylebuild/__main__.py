from stylebuild.main import cli

cli()
