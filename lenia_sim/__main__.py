"""
Lenia - Headless Entry Point

Usage:
    python -m lenia_sim [preset] [options]

Options:
    -r R            kernel radius in cells (default 80)
    -t T            time resolution, dt = 1/T (default 40)
    -m MU           growth center (default 0.23)
    -s SIGMA        growth width (default 0.024)
    -b BETA         ring weights, comma separated (default 1,0.6,0.3)
    --size HxW      grid size (default 512x512)
    --steps N       steps to run (default 100)
    --mode MODE     initial state: patchy or full (default patchy)
    --seed N        RNG seed
    --strategy S    potential path: auto, spectral or spatial
    --kernel        print the kernel summary and exit
    --list          list presets

Examples:
    python -m lenia_sim
    python -m lenia_sim orbium --size 256x256 --steps 500
    python -m lenia_sim -r 10 -t 10 -b 1,0.6 --mode full --seed 7
"""

import sys
import time

from .errors import LeniaError
from .lenia import Lenia
from .presets import PRESET_ORDER, get_preset, list_presets, parse_beta, scale_radius

DEFAULTS = {
    "R": 80, "T": 40, "mu": 0.23, "sigma": 0.024, "beta": [1.0, 0.6, 0.3],
}

_FLAGS = {
    "-r": ("R", int),
    "-t": ("T", float),
    "-m": ("mu", float),
    "-s": ("sigma", float),
    "-b": ("beta", parse_beta),
}


def parse_size(text):
    parts = text.lower().split("x")
    if len(parts) == 1:
        return int(parts[0]), int(parts[0])
    return int(parts[0]), int(parts[1])


def print_kernel(engine):
    K = engine.kernel
    side = K.shape[0]
    mid = side // 2
    print(f"Kernel R={engine.R} beta={list(engine.beta)}: {side}x{side}")
    print(f"  sum={K.sum():.6f}  max={K.max():.6f}  nonzero={int((K > 0).sum())}")
    # Radial profile along the centre row, one value per ring quarter
    stride = max(1, mid // (4 * len(engine.beta)))
    profile = " ".join(f"{K[mid, mid + d]:.2e}" for d in range(0, mid + 1, stride))
    print(f"  profile: {profile}")


def run(engine, steps):
    """Run `steps` steps, printing stats about ten times along the way."""
    every = max(1, steps // 10)
    print(f"  running {steps} steps ({engine.active_strategy} potential)...", flush=True)
    start = time.perf_counter()
    for i in range(steps):
        engine.step()
        if (i + 1) % every == 0 or i + 1 == steps:
            s = engine.stats
            print(f"  gen {s['generation']:6d}  mass {s['mass']:12.2f}  "
                  f"mean {s['mean']:.4f}  max {s['max']:.4f}  "
                  f"alive {s['alive_pct']:5.1f}%", flush=True)
    elapsed = time.perf_counter() - start
    print(f"  done in {elapsed:.2f}s ({steps / max(elapsed, 1e-9):.1f} steps/s)")


def main(argv=None):
    args = sys.argv[1:] if argv is None else list(argv)
    params = dict(DEFAULTS)
    preset = None
    height, width = 512, 512
    steps = 100
    mode = None
    seed = None
    strategy = "auto"
    show_kernel = False
    explicit = set()

    i = 0
    while i < len(args):
        arg = args[i]
        try:
            if arg in _FLAGS and i + 1 < len(args):
                key, conv = _FLAGS[arg]
                params[key] = conv(args[i + 1])
                explicit.add(key)
                i += 2
            elif arg == "--size" and i + 1 < len(args):
                height, width = parse_size(args[i + 1])
                i += 2
            elif arg == "--steps" and i + 1 < len(args):
                steps = int(args[i + 1])
                i += 2
            elif arg == "--mode" and i + 1 < len(args):
                mode = args[i + 1]
                i += 2
            elif arg == "--seed" and i + 1 < len(args):
                seed = int(args[i + 1])
                i += 2
            elif arg == "--strategy" and i + 1 < len(args):
                strategy = args[i + 1]
                i += 2
            elif arg == "--kernel":
                show_kernel = True
                i += 1
            elif arg == "--list":
                print("\nAvailable presets:\n")
                for key, name, desc in list_presets():
                    print(f"    {key:16s} {name:20s} {desc}")
                print()
                return 0
            elif arg in ("--help", "-h"):
                print(__doc__)
                return 0
            elif arg in PRESET_ORDER:
                preset = arg
                i += 1
            else:
                print(f"Unknown argument: {arg}")
                print("Use --help for usage")
                return 2
        except (ValueError, LeniaError) as e:
            print(f"Bad value for {arg}: {e}")
            return 2

    if preset is not None:
        p = get_preset(preset)
        for key in DEFAULTS:
            if key not in explicit:
                params[key] = p[key]
        if "R" not in explicit:
            params["R"] = scale_radius(p["R"], min(height, width))
        if mode is None:
            mode = p.get("seed", "patchy")

    print(f"Lenia {height}x{width}" + (f" preset={preset}" if preset else ""))
    print(f"  R={params['R']} T={params['T']} mu={params['mu']} "
          f"sigma={params['sigma']} beta={params['beta']}")
    try:
        engine = Lenia(height, width, strategy=strategy, seed=seed,
                       init=mode or "patchy", **params)
    except LeniaError as e:
        print(f"Invalid configuration: {e}")
        return 2

    if show_kernel:
        print_kernel(engine)
        return 0

    try:
        run(engine, steps)
    except LeniaError as e:
        print(f"[lenia] Simulation error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
