from .exp_sinh import QuadES, start_index
from .general import mapsum, norm, sum_pairwise, zero_like
from .sinh_sinh import QuadSS
from .tables import WeightTable, generate_branch_tables, generate_ts_tables, search_edge_t
from .tanh_sinh import QuadTS
