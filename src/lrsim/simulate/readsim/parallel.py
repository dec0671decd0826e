"""
并行处理模块

协调进程顺序生成 (元数据, 种子) 工作项，worker 进程只负责组装和测序。
每条 read 的随机数生成器由自己的种子构造，因此输出与 worker 数量无关。
"""

import logging
import multiprocessing as mp
from typing import Iterable, Iterator, List, Optional, Tuple

from .assembler import ReadAssembler
from .models import Description, SimulatedRead

logger = logging.getLogger(__name__)

_READ_ASSEMBLER: Optional[ReadAssembler] = None

WorkItem = Tuple[Description, int]


def get_optimal_workers(requested: int = 0) -> int:
    """
    获取最优worker数量

    Args:
        requested: 请求的worker数，0表示自动

    Returns:
        实际使用的worker数
    """
    cpu_count = mp.cpu_count()

    if requested <= 0:
        return max(1, cpu_count - 1)
    return min(max(1, requested), cpu_count)


def _init_read_worker(assembler: ReadAssembler):
    global _READ_ASSEMBLER
    _READ_ASSEMBLER = assembler


def _worker_simulate(task: WorkItem) -> SimulatedRead:
    if _READ_ASSEMBLER is None:
        raise RuntimeError("Read assembler not initialized in worker process")
    description, seed = task
    return _READ_ASSEMBLER.simulate(description, seed)


def iter_batches(work: Iterable[WorkItem], number_base_store: Optional[int] = None) -> Iterator[List[WorkItem]]:
    """
    按缓冲碱基数切分工作项

    Args:
        work: (元数据, 种子) 迭代器
        number_base_store: 每批最多缓冲的无错误碱基数，None 表示不切分
    """
    batch: List[WorkItem] = []
    buffered = 0
    for item in work:
        batch.append(item)
        buffered += item[0].length
        if number_base_store is not None and buffered >= number_base_store:
            yield batch
            batch = []
            buffered = 0
    if batch:
        yield batch


class ParallelGenerationDriver:
    """
    持久 worker 池

    只读的参考序列和模型随 ReadAssembler 在 worker 初始化时传入一次。
    """

    def __init__(
        self,
        assembler: ReadAssembler,
        num_workers: int = 1,
        number_base_store: Optional[int] = None,
    ):
        if number_base_store is not None and number_base_store <= 0:
            raise ValueError(f"number_base_store must be > 0, got {number_base_store}")

        self.assembler = assembler
        self.num_workers = max(1, num_workers)
        self.number_base_store = number_base_store
        self._pool = None
        if self.num_workers > 1:
            logger.info(f"Using {self.num_workers} workers for parallel read generation")
            self._pool = mp.Pool(
                self.num_workers,
                initializer=_init_read_worker,
                initargs=(assembler,)
            )

    def process_batch(self, batch: List[WorkItem]) -> List[SimulatedRead]:
        """处理一批工作项，返回顺序与输入一致"""
        if self._pool is None:
            return [self.assembler.simulate(description, seed) for description, seed in batch]

        chunksize = max(1, len(batch) // (self.num_workers * 4))
        return self._pool.map(_worker_simulate, batch, chunksize=chunksize)

    def generate(self, work: Iterable[WorkItem]) -> Iterator[List[SimulatedRead]]:
        """逐批生成 read；每批结束前不会开始下一批"""
        for batch in iter_batches(work, self.number_base_store):
            yield self.process_batch(batch)

    def generate_all(self, work: Iterable[WorkItem]) -> List[SimulatedRead]:
        reads: List[SimulatedRead] = []
        for batch in self.generate(work):
            reads.extend(batch)
        return reads

    def close(self):
        if self._pool is not None:
            self._pool.close()
            self._pool.join()
            self._pool = None

    def terminate(self):
        if self._pool is not None:
            self._pool.terminate()
            self._pool.join()
            self._pool = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.close()
        else:
            self.terminate()


class ProgressTracker:
    """进度跟踪器（按碱基数，每 10% 记录一次）"""

    def __init__(self, total: int, desc: str = "Processing"):
        self.total = max(1, total)
        self.desc = desc
        self.current = 0
        self._last_percent = -1

    def update(self, n: int = 1):
        """更新进度"""
        self.current += n
        percent = min(100, int(100 * self.current / self.total))
        step = percent - percent % 10
        if step > self._last_percent:
            logger.info(f"{self.desc}: {step}% ({self.current}/{self.total})")
            self._last_percent = step

    def close(self):
        """完成"""
        if self._last_percent < 100:
            logger.info(f"{self.desc}: 100% ({self.current}/{self.total})")
            self._last_percent = 100
