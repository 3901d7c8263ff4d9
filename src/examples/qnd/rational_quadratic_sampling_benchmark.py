# rational_quadratic_sampling_benchmark.py
# Run with: python rational_quadratic_sampling_benchmark.py

import timeit

import numpy as np

from ratspline.approximation import SplineApproximator
from ratspline.spline import RationalQuadraticSpline

# Fixed test curve
SPLINE = RationalQuadraticSpline.from_control_points(((0.0, 0.0), 1.0), ((50.0, 200.0), 3.0), ((200.0, 0.0), 1.0))

STEPS_LIST = [10, 20, 30, 40, 50, 60, 70, 80, 90, 100, 150, 200, 300, 500, 1_000]


def version1_python_loop(steps: int):
    return SplineApproximator.segments_python(SPLINE, steps)


def version2_numpy(steps: int):
    return SplineApproximator.segments_numpy(SPLINE, steps)


def main(number: int = 200):
    """Compare python and numpy sampling and check that both agree."""
    print(f"{'steps':>8} {'python [us]':>12} {'numpy [us]':>12}")
    for steps in STEPS_LIST:
        assert np.allclose(version1_python_loop(steps), version2_numpy(steps))
        t_python = timeit.timeit(lambda: version1_python_loop(steps), number=number) / number * 1e6
        t_numpy = timeit.timeit(lambda: version2_numpy(steps), number=number) / number * 1e6
        print(f"{steps:>8} {t_python:>12.1f} {t_numpy:>12.1f}")


if __name__ == "__main__":
    main()
