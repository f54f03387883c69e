# ofitune

`ofitune` selects the algorithm and protocol for a collective operation
(AllReduce, AllGather, ReduceScatter) that runs across a multi-node GPU
cluster. It provides two tuners:

- **Region tuner** (`ofitune.region_tuner.RegionTuner`): a table of polygons
  in the plane of message size by rank count. Each polygon names one
  algorithm/protocol pair. The tuner returns the pair of the first polygon
  that contains the point, and a point on a polygon's edge counts as inside.
  The tables are in `ofitune.region_tables`.
- **Model tuner** (`ofitune.model.ModelTuner`): a latency-plus-bandwidth cost
  model (`ofitune.model.compute_cost`). It scores each candidate pair and
  keeps the cheapest. At present the model covers only AllReduce.

Both tuners have data for the `p5.48xlarge`, `p5e.48xlarge` and
`p5en.48xlarge` platforms. Neither tuner makes a choice, and returns `None`,
in these cases:

- the communicator has two nodes or fewer;
- the platform or the communicator shape has no data;
- no region or model applies.

When a tuner returns `None`, the caller should use its own default.

## Installation

```
pip install ofitune
```

The package has no runtime dependencies. To install the test dependencies,
use the `test` extra: `pip install "ofitune[test]"`.

## Usage

### One tuner per communicator

```python
from ofitune.common import CollType, new_cost_table
from ofitune.tuner import create_tuner

tuner = create_tuner(n_ranks=128, n_nodes=16, platform_name="p5.48xlarge", force_type=None)
if tuner is not None:
    table = new_cost_table(num_algo=7, num_proto=3)   # every cost starts at infinity
    choice = tuner.get_coll_info_v3(CollType.ALL_REDUCE, 1 << 30, 1, table)
    if choice is not None:
        algo, proto = choice
        assert table[algo][proto] == 0.0
```

`create_tuner` returns `None` if `platform_name` is `None`, if the platform is
not known, or if `force_type` is `"Internal"`. If both tuners support the
platform, `create_tuner` picks the region tuner. Pass `force_type="Model"` to
get the model tuner instead.

Each tuner has two lookup methods:

- `get_coll_info_v3(coll_type, n_bytes, num_pipe_ops, cost_table)` sets the
  chosen entry of `cost_table` to `0.0` and returns `(Algorithm, Protocol)`.
  The region tuner skips any entry that equals
  `ofitune.common.ALGO_PROTO_IGNORE` and any pair that lies outside the table.
- `get_coll_info_v2(coll_type, n_bytes, coll_net_support, nvls_support, num_pipe_ops)`
  returns the chosen pair without a table. If `nvls_support` is false,
  NVLS-tree is never picked. The region tuner also skips PAT regions in this
  method.

Either method returns `None` when it has nothing to choose.

### Process-wide tuner

`ofitune.tuner.GlobalTuner` holds one tuner for callers that cannot pass a
context around. A call to `init` replaces any tuner that an earlier call
created.

```python
from ofitune.common import CollType
from ofitune.tuner import GlobalTuner

gt = GlobalTuner()
gt.init(128, 16, "p5en.48xlarge", environ={})
choice = gt.get_coll_info(CollType.ALL_REDUCE, 1 << 20, 0, 1, 1)
gt.destroy()
```

`init` reads `OFI_NCCL_TUNER_TYPE` from the `environ` you pass. If `environ` is
omitted, it reads the process environment through `ofitune.params`. It raises
`TunerError` if `NCCL_ALGO` or `NCCL_PROTO` is set.

### Configuration

The parameters in `ofitune.params` come from environment variables with the
`OFI_NCCL_` prefix. Each one is a `Param`:

- `Param.value()` reads the environment the first time it is called, then
  keeps the value.
- `Param.reset()` clears the kept value for that parameter, and
  `ofitune.params.reset_all()` clears it for every parameter.
- `ofitune.params.lookup(name)` finds a built-in parameter by name.

Integer values follow C base-prefix rules (`0x` for hex, a leading `0` for
octal). A value that does not parse falls back to the default.

The tuners use these parameters:

| Variable | Default | Effect |
| --- | --- | --- |
| `OFI_NCCL_TUNER_TYPE` | not set | `Internal` turns tuning off. `Model` selects the model tuner where the platform supports it. Any other value leaves the region tuner preferred. |
| `OFI_NCCL_TUNER_NUM_CHANNELS` | `8` | Number of channels the cost model assumes. |
| `OFI_NCCL_TUNER_NET_COMP_OVERHEAD` | `3` | Completion overhead, in µs, that the cost model adds for the Simple protocol. |

### Other modules

- `ofitune.geometry`: `Point`, `Region`, `is_inside_region` (ray casting),
  `intersect`, `distance` and `extend_region`.
- `ofitune.common`: the enumerations `Algorithm`, `Protocol`, `CollType`,
  `Platform` and `TunerType`, plus `new_cost_table`.
- `ofitune.mathutil`: `div_ceil`, `is_power_of_two`, `is_aligned`,
  `round_down` and `round_up`. The alignment arguments must be powers of two.
- `ofitune.deque.Deque`: a thread-safe double-ended queue. It tracks items by
  identity, so any item can be removed directly, and the current item can be
  removed during iteration. `None` cannot be stored.
- `ofitune.mrkey`: `CacheKey` for iovec and dma-buf memory regions.
  `make_iovec_key` rounds a region out to whole pages, and `round_region`
  performs that rounding.

## What this package does not do

`ofitune` makes tuning decisions only. It does not:

- provide a network transport;
- register memory with a device;
- load itself into a collective communication library;
- include a command-line tool.

To use its choices, call it from your own code.