"""
Command-line interface using Click for running oracle experiments and
inspecting region counts.
"""
import logging
import click
from pathlib import Path
from ensemble import DEFAULT_MAX_REGIONS, OracleConfigError, check_region_budget
from src.experiment import ExperimentConfig, format_progress, print_results, run_experiment
from src.utils.config import load_config, section
from src.utils.storage import save_dataframe


@click.group()
@click.option('--config', 'config_path', type=click.Path(dir_okay=False), default=None,
              help='Alternative config.yaml')
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
@click.pass_context
def cli(ctx, config_path, verbose):
    cfg = load_config(config_path)
    level = 'DEBUG' if verbose else section(cfg, 'logging').get('level', 'INFO')
    logging.basicConfig(level=level, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    ctx.obj = cfg


@cli.command()
@click.argument('nsamples', type=click.IntRange(min=1))
@click.argument('nbins', type=click.IntRange(min=2))
@click.argument('nmodels', type=click.IntRange(min=1))
@click.argument('ntries', type=click.IntRange(min=1))
@click.argument('std', type=click.FloatRange(min=0.0))
@click.option('--seed', type=int, default=None)
@click.option('--epochs', type=click.IntRange(min=1), default=None, help='Training epochs per model')
@click.option('--output', '-o', type=click.Path(dir_okay=False), default=None,
              help='Write per-trial errors (parquet or csv); relative paths go under storage.report_dir')
@click.pass_obj
def run(cfg, nsamples, nbins, nmodels, ntries, std, seed, epochs, output):
    """Compare the oracle with its baseline models over NTRIES trials."""
    model_cfg = dict(section(cfg, 'model'))
    if epochs is not None:
        model_cfg['epochs'] = epochs
    exp_cfg = section(cfg, 'experiment')

    config = ExperimentConfig(
        nsamples=nsamples,
        categories=nbins,
        nmodels=nmodels,
        ntries=ntries,
        std=std,
        test_multiplier=exp_cfg.get('test_multiplier', 10),
        seed=seed if seed is not None else exp_cfg.get('seed'),
        max_regions=section(cfg, 'oracle').get('max_regions', DEFAULT_MAX_REGIONS),
        model=model_cfg,
    )

    try:
        check_region_budget(nbins, nmodels, config.max_regions)
    except OracleConfigError as e:
        raise click.UsageError(str(e))

    result = run_experiment(config, on_trial=lambda r: click.echo('\n' + format_progress(r)))
    print_results(result)

    if output:
        path = Path(output)
        report_dir = section(cfg, 'storage').get('report_dir')
        if report_dir and not path.is_absolute():
            path = Path(report_dir) / path
        path = save_dataframe(result.to_dataframe(), path)
        click.echo(f'Stored report at {path}')


@cli.command()
@click.argument('predictors', type=click.IntRange(min=1))
@click.option('--categories', '-c', type=click.IntRange(min=2), default=None,
              help='Categories per predictor (default: oracle.categories)')
@click.option('--ncases', type=click.IntRange(min=1), default=None,
              help='Training set size to compare against')
@click.pass_obj
def regions(cfg, categories, predictors, ncases):
    """Show how many regions PREDICTORS produce at the configured categories."""
    if categories is None:
        categories = section(cfg, 'oracle').get('categories', 2)
        if categories < 2:
            raise click.UsageError(f'oracle.categories must be at least 2, got {categories}')
    n_regions = categories ** predictors
    click.echo(f'{categories} ** {predictors} = {n_regions} regions')
    limit = section(cfg, 'oracle').get('max_regions', DEFAULT_MAX_REGIONS)
    if n_regions > limit:
        click.echo(f'Exceeds the configured limit of {limit}', err=True)
        raise click.exceptions.Exit(1)
    if ncases is not None and n_regions > ncases:
        click.echo(f'Warning: more regions than the {ncases} training cases; '
                   f'unseen regions fall back to predictor 0', err=True)


if __name__ == '__main__':
    cli()
