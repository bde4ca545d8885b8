"""
Example: Building and solving an LP and a MIP with lpbridge

Problem 1 (LP, built variable by variable):
    maximize     x1 + 2*x2 - x3
    subject to   2*x1 +   x2 +   x3 <= 14
                 4*x1 + 2*x2 + 3*x3 <= 28
                 2*x1 + 5*x2 + 5*x3 <= 30
                 x1, x2, x3 >= 0

Problem 2 (same LP from arrays, with x1 integer):
    lpbridge.solve(A, AL, AU, l, u, c, integrality, direction='maximize')
"""

import logging

import numpy as np
from scipy import sparse
import lpbridge
from lpbridge.backends import available_backends


def build_model():
    model = lpbridge.Model(
        "example", lpbridge.Direction.MAXIMIZE,
        lpbridge.with_logger(lpbridge.StandardLogger()),
    )
    x1 = model.add_variable("x1", coefficient=1.0, lower=0)
    x2 = model.add_variable("x2", coefficient=2.0, lower=0)
    x3 = model.add_variable("x3", coefficient=-1.0, lower=0)

    model.add_constraint(0, 14, [x1, x2, x3], [2.0, 1.0, 1.0])
    model.add_constraint(0, 28, [x1, x2, x3], [4.0, 2.0, 3.0])
    model.add_constraint(0, 30, [x1, x2, x3], [2.0, 5.0, 5.0])
    return model


def main():
    print()
    print("=" * 70)
    print("lpbridge Example: LP and MIP")
    print("=" * 70)
    print(f"Available engines: {', '.join(available_backends()) or 'none'}")
    print()

    # Step 1: Build the model
    with build_model() as model:
        print(f"Model created: {model!r}")
        print()

        # Step 2: Solve with a 10 second deadline
        ctx = lpbridge.CancelContext.with_timeout(10.0)
        result = model.solve_with_context(ctx)

        # Step 3: Display results
        print(result)
        print()
        print("Primal solution:")
        for variable in model.variables:
            print(f"  {variable.name} = {result.value(variable):.6f}")
        print()

    # Step 4: The same problem from arrays, with x1 integer
    A = sparse.csr_matrix([
        [2.0, 1.0, 1.0],
        [4.0, 2.0, 3.0],
        [2.0, 5.0, 5.0],
    ])
    AL = np.zeros(3)
    AU = np.array([14.0, 28.0, 30.0])
    l = np.zeros(3)
    u = np.full(3, np.inf)
    c = np.array([1.0, 2.0, -1.0])

    solution = lpbridge.solve(A, AL, AU, l, u, c, integrality=[1, 0, 0], direction='maximize')
    print("=" * 70)
    print("MIP Solution Summary")
    print("=" * 70)
    print(f"Status: {solution.status.value}")
    print(f"Objective: {solution.objective_value:.6f}")
    print(f"x = {solution.x}")
    print()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    try:
        main()
    except lpbridge.BackendUnavailableError as e:
        print(f"Error: {e}")
        print("\nPlease install a solver engine first, e.g.:")
        print("  apt install libglpk40     # or liblpsolve55-dev")
