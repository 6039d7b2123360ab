#!/usr/bin/env python3
# -*- coding: utf-8 -*-

import random
import unittest

import pejelagarto as pj
from textgen import random_digits, random_numeric_text


class NumberStageTests(unittest.TestCase):
    def test_negative_numbers_use_base_seven(self) -> None:
        self.assertEqual(pj.numbers_to_pejelagarto("-5"), "-5")
        self.assertEqual(pj.numbers_to_pejelagarto("-12"), "-15")
        self.assertEqual(pj.numbers_from_pejelagarto("-15"), "-12")

    def test_positive_numbers_use_base_eight(self) -> None:
        self.assertEqual(pj.numbers_to_pejelagarto("8"), "10")
        self.assertEqual(pj.numbers_to_pejelagarto("abc 255 xyz"), "abc 377 xyz")
        self.assertEqual(pj.numbers_from_pejelagarto("abc 377 xyz"), "abc 255 xyz")

    def test_zeros(self) -> None:
        self.assertEqual(pj.numbers_to_pejelagarto("0"), "0")
        self.assertEqual(pj.numbers_to_pejelagarto("-0"), "-0")
        self.assertEqual(pj.numbers_to_pejelagarto("007"), "007")
        self.assertEqual(pj.numbers_to_pejelagarto("0010"), "0012")
        self.assertEqual(pj.numbers_to_pejelagarto("-07"), "-010")
        self.assertEqual(pj.numbers_from_pejelagarto("0012"), "0010")

    def test_minus_between_numbers(self) -> None:
        self.assertEqual(pj.numbers_to_pejelagarto("9-8"), "11-11")
        self.assertEqual(pj.numbers_from_pejelagarto("11-11"), "9-8")
        self.assertEqual(pj.numbers_to_pejelagarto("--9"), "--12")

    def test_runs_outside_the_base_are_left_alone(self) -> None:
        self.assertEqual(pj.numbers_from_pejelagarto("89"), "89")
        self.assertEqual(pj.numbers_from_pejelagarto("-78"), "-78")
        self.assertEqual(pj.numbers_from_pejelagarto("-17"), "-17")

    def test_non_ascii_digits_untouched(self) -> None:
        self.assertEqual(pj.numbers_to_pejelagarto("٣٤ ９"), "٣٤ ９")

    def test_matches_builtin_octal(self) -> None:
        rng = random.Random(5)
        digits = str(rng.randint(1, 9)) + "".join(rng.choice("0123456789") for _ in range(999))
        self.assertEqual(pj.numbers_to_pejelagarto(digits), format(int(digits), "o"))

    def test_numerals_longer_than_the_int_digit_limit(self) -> None:
        rng = random.Random(4301)
        for length in (4300, 4301, 6000):
            text = "x" + random_digits(rng, length) + " -" + random_digits(rng, length)
            coded = pj.numbers_to_pejelagarto(text)
            self.assertEqual(pj.numbers_from_pejelagarto(coded), text)

    def test_round_trip_random(self) -> None:
        rng = random.Random(88)
        for _ in range(300):
            text = random_numeric_text(rng)
            with self.subTest(text=text):
                self.assertEqual(pj.numbers_from_pejelagarto(pj.numbers_to_pejelagarto(text)), text)


if __name__ == "__main__":
    unittest.main()
