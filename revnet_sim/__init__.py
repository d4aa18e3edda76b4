"""
Revnet issuance/redemption model with a constant-product pool and a seeded trader population.
"""
from . import agents
from . import config
from . import liquidity_pool
from . import revnet
from . import router
from . import run
from . import sampling
from . import utils

from .config import SimulationConfig, load_simulation_config
from .liquidity_pool import Asset, ConstantProductPool
from .revnet import Revnet
from .router import Execution, ExecutionSource, route_purchase, route_sale
from .run import DailySnapshot, SimulationResult, simulate
from .sampling import SeededSampler

__all__ = [
    'agents', 'config', 'liquidity_pool', 'revnet', 'router', 'run', 'sampling', 'utils',
    'SimulationConfig', 'load_simulation_config',
    'Asset', 'ConstantProductPool',
    'Revnet',
    'Execution', 'ExecutionSource', 'route_purchase', 'route_sale',
    'DailySnapshot', 'SimulationResult', 'simulate',
    'SeededSampler',
]
