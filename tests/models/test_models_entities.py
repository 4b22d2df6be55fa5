import unittest

from treestore.models import DeleteResult, OrderItem


class TestOrderItem(unittest.TestCase):
    def test_from_mapping(self) -> None:
        item = OrderItem.from_value({"id": "A", "order": 2})
        self.assertEqual(item, OrderItem(id="A", order=2))

    def test_from_pair(self) -> None:
        self.assertEqual(OrderItem.from_value(("B", 0)), OrderItem(id="B", order=0))

    def test_from_item_is_identity(self) -> None:
        item = OrderItem(id="C", order=1)
        self.assertIs(OrderItem.from_value(item), item)

    def test_from_unsupported_type(self) -> None:
        with self.assertRaises(TypeError):
            OrderItem.from_value("A:1")


class TestDeleteResult(unittest.TestCase):
    def test_empty_result_is_not_deleted(self) -> None:
        self.assertFalse(DeleteResult().deleted)
        self.assertTrue(DeleteResult(folder_ids=["A"]).deleted)


if __name__ == "__main__":
    unittest.main()
