"""图层存储.

文档的有序图层集合。序列顺序就是层级顺序：索引 0 为最顶层，
最后一个为最底层，新图层总是插入到索引 0。

Features:
    - 增删改查
    - 上下移动层级
    - 复制图层
    - 当前选中图层
    - 变更监听
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Iterator, Optional

from brand_studio.models.layer import Layer, generate_layer_id
from brand_studio.utils.constants import DUPLICATE_NAME_SUFFIX, DUPLICATE_OFFSET
from brand_studio.utils.exceptions import LayerKindMismatchError
from brand_studio.utils.logger import setup_logger

logger = setup_logger(__name__)

ChangeListener = Callable[["LayerStore"], None]


class Direction(str, Enum):
    """层级移动方向."""

    UP = "up"  # 朝顶层（索引减小）
    DOWN = "down"  # 朝底层（索引增大）


class LayerStore:
    """图层存储.

    所有修改都是同步且原子的；每次有效修改后通知监听器。
    引用不存在的图层ID的操作都是空操作，不抛异常。

    Example:
        >>> store = LayerStore()
        >>> layer_id = store.add(Layer(payload=ShapePayload()))
        >>> store.ids == [layer_id]
        True
    """

    def __init__(self, layers: Optional[list[Layer]] = None) -> None:
        self._layers: list[Layer] = []
        self._selected_id: Optional[str] = None
        self._listeners: list[ChangeListener] = []
        for layer in reversed(layers or []):
            self._insert_top(layer)

    # ===================
    # 查询
    # ===================

    def __len__(self) -> int:
        return len(self._layers)

    def __iter__(self) -> Iterator[Layer]:
        return iter(list(self._layers))

    def __contains__(self, layer_id: object) -> bool:
        return self.index_of(layer_id) is not None  # type: ignore[arg-type]

    @property
    def layers(self) -> list[Layer]:
        """图层列表副本（顶层在前）."""
        return list(self._layers)

    @property
    def ids(self) -> list[str]:
        """图层ID列表（顶层在前）."""
        return [layer.id for layer in self._layers]

    def index_of(self, layer_id: str) -> Optional[int]:
        """获取图层索引，不存在返回 None."""
        for i, layer in enumerate(self._layers):
            if layer.id == layer_id:
                return i
        return None

    def get(self, layer_id: Optional[str]) -> Optional[Layer]:
        """根据ID获取图层."""
        if layer_id is None:
            return None
        index = self.index_of(layer_id)
        return self._layers[index] if index is not None else None

    # ===================
    # 选中
    # ===================

    @property
    def selected_id(self) -> Optional[str]:
        """当前选中图层ID."""
        return self._selected_id

    @property
    def selected(self) -> Optional[Layer]:
        """当前选中图层."""
        return self.get(self._selected_id)

    def select(self, layer_id: Optional[str]) -> None:
        """选中图层，传入 None 或不存在的ID则清除选中."""
        new_id = layer_id if layer_id is not None and layer_id in self else None
        if new_id == self._selected_id:
            return
        self._selected_id = new_id
        logger.debug(f"选中图层: {new_id}")
        self._notify()

    # ===================
    # 修改
    # ===================

    def add(self, layer: Layer) -> str:
        """添加图层到顶层.

        Args:
            layer: 图层

        Returns:
            图层ID（ID冲突时会被重新分配）
        """
        layer_id = self._insert_top(layer)
        logger.debug(f"添加图层: {layer_id} ({layer.kind.value})")
        self._notify()
        return layer_id

    def update(self, layer_id: str, **fields: Any) -> None:
        """浅合并更新图层字段.

        不校验画布边界，图层可以部分或全部位于画布之外。

        Args:
            layer_id: 图层ID
            **fields: 要更新的字段

        Raises:
            LayerKindMismatchError: 新内容类型与图层类型不一致
            pydantic.ValidationError: 字段值无效
        """
        index = self.index_of(layer_id)
        if index is None:
            logger.debug(f"更新图层跳过，图层不存在: {layer_id}")
            return

        current = self._layers[index]
        fields.pop("id", None)
        # kind 创建后不可变
        if "kind" in fields and fields["kind"] != current.kind:
            requested = getattr(fields["kind"], "value", fields["kind"])
            raise LayerKindMismatchError(str(requested), current.payload.type)
        payload = fields.get("payload")
        if payload is not None:
            payload_type = payload.get("type") if isinstance(payload, dict) else payload.type
            if payload_type != current.kind.value:
                raise LayerKindMismatchError(current.kind.value, str(payload_type))

        self._layers[index] = current.merged(**fields)
        logger.debug(f"更新图层: {layer_id} {sorted(fields)}")
        self._notify()

    def update_payload(self, layer_id: str, **fields: Any) -> None:
        """浅合并更新图层内容字段.

        Args:
            layer_id: 图层ID
            **fields: 要更新的内容字段（不能修改 type）
        """
        layer = self.get(layer_id)
        if layer is None:
            return
        fields.pop("type", None)
        payload = layer.payload.model_validate(
            {**layer.payload.model_dump(), **fields}
        )
        self.update(layer_id, payload=payload)

    def delete(self, layer_id: str) -> None:
        """删除图层，被删除的图层若处于选中状态则清除选中."""
        index = self.index_of(layer_id)
        if index is None:
            return
        self._layers.pop(index)
        if self._selected_id == layer_id:
            self._selected_id = None
        logger.debug(f"删除图层: {layer_id}")
        self._notify()

    def reorder(self, layer_id: str, direction: Direction | str) -> None:
        """与相邻图层交换位置.

        Args:
            layer_id: 图层ID
            direction: up 朝顶层，down 朝底层；到达边界时为空操作
        """
        direction = Direction(direction)
        index = self.index_of(layer_id)
        if index is None:
            return

        new_index = index - 1 if direction == Direction.UP else index + 1
        if new_index < 0 or new_index >= len(self._layers):
            return

        self._layers[index], self._layers[new_index] = (
            self._layers[new_index],
            self._layers[index],
        )
        logger.debug(f"移动图层: {layer_id} {direction.value} -> {new_index}")
        self._notify()

    def duplicate(self, layer_id: str) -> Optional[str]:
        """复制图层.

        副本获得新ID，位置偏移 (+20, +20)，名称追加 " copy"，插入顶层并被选中。

        Args:
            layer_id: 源图层ID

        Returns:
            新图层ID，源图层不存在返回 None
        """
        source = self.get(layer_id)
        if source is None:
            return None

        copy = source.clone(
            new_id=self._unique_id(),
            name_suffix=DUPLICATE_NAME_SUFFIX,
            offset=DUPLICATE_OFFSET,
        )
        new_id = self._insert_top(copy)
        self._selected_id = new_id
        logger.debug(f"复制图层: {layer_id} -> {new_id}")
        self._notify()
        return new_id

    def clear(self) -> None:
        """清空所有图层."""
        if not self._layers and self._selected_id is None:
            return
        self._layers.clear()
        self._selected_id = None
        self._notify()

    # ===================
    # 监听
    # ===================

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """注册变更监听器.

        Returns:
            取消注册的函数
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)

    # ===================
    # 内部方法
    # ===================

    def _unique_id(self) -> str:
        existing = set(self.ids)
        while True:
            candidate = generate_layer_id()
            if candidate not in existing:
                return candidate

    def _insert_top(self, layer: Layer) -> str:
        if layer.id in self:
            layer = layer.model_copy(update={"id": self._unique_id()})
        self._layers.insert(0, layer)
        return layer.id

