"""Command-line dose-response fitter.

Example::

    pyhillfit --num-params 2 --concs 0.37,1.11,3.33,10 --responses 27.49,51.45,74.8,88.49
"""

from __future__ import annotations

import logging
import re

import click

from pyhillfit.doseresponse import HillFitter, pic50_from_ic50
from pyhillfit.optimize import SimplexOptions


def _parse_floats(ctx, param, value):
    if value is None:
        return None
    items = [v for v in re.split(r"[,\s]+", value.strip()) if v]
    try:
        return [float(v) for v in items]
    except ValueError:
        raise click.BadParameter(f"expected a list of numbers, got {value!r}") from None


@click.command()
@click.option('--num-params', type=click.Choice(['1', '2']), default='1', show_default=True,
              help='Fit IC50 only (1) or IC50 and Hill coefficient (2).')
@click.option('--concs', required=True, callback=_parse_floats,
              help='Concentrations in uM, comma- or space-separated.')
@click.option('--responses', required=True, callback=_parse_floats,
              help='Percent inhibitions, one per concentration.')
@click.option('--hill-limits', type=(float, float), default=None,
              help='Minimum and maximum Hill coefficient.')
@click.option('--round/--no-round', 'round_values', default=False,
              help='Cap IC50 at 1e6 uM for inactive compounds.')
@click.option('-v', '--verbose', is_flag=True, help='Log minimizer progress at every iteration.')
def main(num_params, concs, responses, hill_limits, round_values, verbose):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if len(concs) != len(responses):
        raise click.UsageError(
            "The list of concentrations and responses must be the same length, "
            f"they appear to be {len(concs)} and {len(responses)}."
        )

    n_params = int(num_params)
    if len(concs) == 1:
        # Don't try and fit two parameters to one data point.
        n_params = 1

    click.echo(f"Fit is using {len(concs)} dose-response points.")

    try:
        options = SimplexOptions(display_iterations=True) if verbose else None
        fitter = HillFitter(concs, responses, n_params,
                            round_values=round_values, options=options)
        if hill_limits is not None:
            fitter.set_hill_limits(*hill_limits)
    except ValueError as exc:
        raise click.UsageError(str(exc)) from None

    params = fitter.run()
    ic50 = float(params[0])
    hill = float(params[1]) if params.size > 1 else 1.0
    pic50 = pic50_from_ic50(ic50) if ic50 > 0 else float("nan")

    click.echo(f"The IC50 is {ic50:g} uM, [pIC50 is {pic50:g} (log M)]")
    click.echo(f"and the hill coefficient is {hill:g}.")


if __name__ == '__main__':
    main()
