#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import random
import unittest

import pejelagarto as pj
from textgen import random_unicode


class SequenceTests(unittest.TestCase):
    def test_fibonacci(self) -> None:
        self.assertEqual(pj.fibonacci_positions(10), [1, 2, 3, 5, 8])
        self.assertEqual(pj.fibonacci_positions(0), [])

    def test_tribonacci(self) -> None:
        self.assertEqual(pj.tribonacci_positions(30), [1, 2, 4, 7, 13, 24])
        self.assertEqual(pj.tribonacci_positions(1), [1])


class WordCountTests(unittest.TestCase):
    def test_counts(self) -> None:
        self.assertEqual(pj.count_words("hello world"), 2)
        self.assertEqual(pj.count_words("a1 b2-c3"), 3)
        self.assertEqual(pj.count_words("..."), 0)
        self.assertEqual(pj.count_words("٣ x"), 2)


class FlipCaseTests(unittest.TestCase):
    def test_odd_word_count_uses_fibonacci(self) -> None:
        self.assertEqual(pj.flip_case("hello"), "HELlO")

    def test_even_word_count_uses_tribonacci(self) -> None:
        self.assertEqual(pj.flip_case("ab cd"), "AB cD")

    def test_nothing_to_flip(self) -> None:
        self.assertEqual(pj.flip_case(""), "")
        self.assertEqual(pj.flip_case("!!!"), "!!!")

    def test_one_way_case_mappings_are_skipped(self) -> None:
        self.assertEqual(pj.flip_case("ß"), "ß")
        self.assertEqual(pj.flip_case("İ"), "İ")
        self.assertEqual(pj.flip_case("\u212A"), "\u212A")

    def test_self_inverse(self) -> None:
        rng = random.Random(1123)
        for _ in range(300):
            text = random_unicode(rng)
            with self.subTest(text=text):
                flipped = pj.flip_case(text)
                self.assertEqual(len(flipped), len(text))
                self.assertEqual(pj.count_words(flipped), pj.count_words(text))
                self.assertEqual(pj.flip_case(flipped), text)


if __name__ == "__main__":
    unittest.main()
